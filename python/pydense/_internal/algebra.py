"""Elementwise primitives and the arithmetic closures built on them.

All elementwise behaviour in ``Matrix`` goes through ``apply_one``,
``apply_two`` or ``generate``. Each primitive walks cursors over the flat
buffer in row-major order and writes results back in place; NumPy performs
the store-time conversion into the buffer's dtype.
"""
from __future__ import annotations

from typing import Any, Callable

import numpy as np

from .cursor import MatrixCursor, walk


def apply_one(begin: MatrixCursor, end: MatrixCursor, op: Callable[[Any], Any]) -> None:
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        for pos in walk(begin, end):
            pos.set(op(pos.get()))


def apply_two(
    begin: MatrixCursor,
    end: MatrixCursor,
    other: MatrixCursor,
    op: Callable[[Any, Any], Any],
) -> None:
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        for n, pos in enumerate(walk(begin, end)):
            pos.set(op(pos.get(), other[n]))


def generate(begin: MatrixCursor, end: MatrixCursor, producer: Callable[[], Any]) -> None:
    for pos in walk(begin, end):
        pos.set(producer())


def accumulate(begin: MatrixCursor, end: MatrixCursor, init: Any) -> Any:
    total = init
    with np.errstate(over="ignore"):
        for pos in walk(begin, end):
            total = total + pos.get()
    return total


# --- closures ---


def add_scalar(k: Any) -> Callable[[Any], Any]:
    return lambda x: x + k


def sub_scalar(k: Any) -> Callable[[Any], Any]:
    return lambda x: x - k


def mul_scalar(k: Any) -> Callable[[Any], Any]:
    return lambda x: x * k


def div_scalar(k: Any, *, integral: bool) -> Callable[[Any], Any]:
    if integral:
        return lambda x: truncating_div(x, k)
    return lambda x: x / k


def truncating_div(x: Any, k: Any) -> Any:
    # Integer quotient rounded toward zero; floor division differs for negative operands.
    q = x // k
    if (x % k != 0) and ((x < 0) != (k < 0)):
        q = q + 1
    return q


def constant(value: Any) -> Callable[[], Any]:
    return lambda: value


def round_half_away(x: Any) -> Any:
    t = np.trunc(x)
    if abs(x - t) >= 0.5:
        t = t + np.copysign(1, x)
    return t


ROUNDING = {
    "round": round_half_away,
    "floor": np.floor,
    "ceil": np.ceil,
}

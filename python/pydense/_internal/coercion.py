from __future__ import annotations

from collections.abc import Sequence as _SequenceABC
from typing import Any

import numpy as np


def is_sequence_like(value: Any) -> bool:
    return isinstance(value, _SequenceABC) and not isinstance(value, (str, bytes, bytearray))


def coerce_sequence_rows(candidate: Any) -> tuple[int, int, list[Any]]:
    """Flatten a rectangular nested sequence into ``(rows, cols, values)``."""
    if not is_sequence_like(candidate):
        raise TypeError("Matrix data must be provided as a nested sequence or a 2D NumPy array.")
    rows = [row for row in candidate]
    if not rows:
        return 0, 0, []
    cols: int | None = None
    values: list[Any] = []
    for row in rows:
        if not is_sequence_like(row):
            raise TypeError("Each matrix row must be a sequence of entries.")
        if cols is None:
            cols = len(row)
        elif len(row) != cols:
            raise ValueError("Matrix data must be rectangular (every row the same length).")
        for val in row:
            if is_sequence_like(val):
                raise TypeError("Matrix data must be 2D; got a deeper nested sequence.")
            values.append(val)
    return len(rows), cols or 0, values


def coerce_general_matrix(candidate: Any) -> tuple[int, int, list[Any], Any]:
    """Return ``(rows, cols, values, source_dtype)`` for matrix-like input.

    ``source_dtype`` is the dtype carried by the input (NumPy arrays and
    matrix-like objects), or None for plain Python data.
    """
    rows_attr: Any = getattr(candidate, "rows", None)
    cols_attr: Any = getattr(candidate, "cols", None)
    get_attr: Any = getattr(candidate, "get", None)
    if callable(rows_attr) and callable(cols_attr) and callable(get_attr):
        r = int(rows_attr())
        c = int(cols_attr())
        values = [get_attr(i, j) for i in range(r) for j in range(c)]
        return r, c, values, getattr(candidate, "dtype", None)

    if isinstance(candidate, np.ndarray):
        if candidate.ndim != 2:
            raise ValueError("Matrix input must be a 2D structure.")
        r, c = candidate.shape
        return int(r), int(c), candidate.ravel(order="C").tolist(), candidate.dtype

    r, c, values = coerce_sequence_rows(candidate)
    return r, c, values, None

from __future__ import annotations

import warnings
from typing import Any

import numpy as np

from . import dtypes as _dtypes
from .cursor import MatrixCursor, walk
from ..errors import DimensionMismatch, ShapeMismatch, TypeNotConvertible
from .warnings import PyDenseOverflowRiskWarning


def require_same_shape(a: Any, b: Any, *, op: str) -> None:
    if a.shape != b.shape:
        raise ShapeMismatch(f"{op}: shape mismatch {a.shape} vs {b.shape}")


def require_inner_match(a: Any, b: Any) -> None:
    if a.cols() != b.rows():
        raise DimensionMismatch(
            f"matmul: left columns ({a.cols()}) != right rows ({b.rows()}) for {a.shape} @ {b.shape}"
        )


def require_convertible(src: str, dst: str, *, op: str) -> None:
    if not _dtypes.can_convert(src, dst):
        raise TypeNotConvertible(
            f"{op}: {src} is not convertible to {dst} under "
            f"casting={_dtypes.get_conversion_casting()!r}"
        )


def _max_abs(buffer: Any) -> int:
    if buffer is None or len(buffer) == 0:
        return 0
    return max(abs(int(x)) for x in buffer)


def overflow_preflight(
    token: str,
    a_shape: tuple[int, int],
    a_data: Any,
    b_shape: tuple[int, int],
    b_data: Any,
    *,
    stacklevel: int = 2,
) -> None:
    """Warn when an integral product could exceed the output dtype.

    The bound ``inner * max|A| * max|B|`` is a heuristic; it may warn for
    products that do not actually overflow.
    """
    if not _dtypes.is_integral(token):
        return
    inner = a_shape[1]
    if inner == 0:
        return
    bound = inner * _max_abs(a_data) * _max_abs(b_data)
    limit = int(np.iinfo(np.dtype(token)).max)
    if bound > limit:
        warnings.warn(
            f"matmul preflight: {a_shape} @ {b_shape} may overflow {token} output "
            f"(bound {bound} > {limit})",
            PyDenseOverflowRiskWarning,
            stacklevel=stacklevel,
        )


def matmul_buffer(a_data: Any, rows: int, inner: int, b_data: Any, cols: int, dtype: np.dtype) -> Any:
    """Return the flat row-major product buffer of ``A (rows x inner) @ B (inner x cols)``.

    Each output cell accumulates the dot product over the shared dimension.
    ``b_data`` must already hold ``dtype`` elements.
    """
    if rows == 0 or cols == 0 or inner == 0:
        return np.zeros(rows * cols, dtype=dtype)
    with np.errstate(over="ignore", invalid="ignore"):
        try:
            product = np.matmul(a_data.reshape(rows, inner), b_data.reshape(inner, cols))
            return product.reshape(rows * cols).astype(dtype, copy=False)
        except TypeError:
            pass

        # Generic accumulating loop for dtypes without a matmul kernel.
        out = np.zeros(rows * cols, dtype=dtype)
        zero = dtype.type(0)
        for i in range(rows):
            row = MatrixCursor(a_data, i * inner)
            for j in range(cols):
                acc = zero
                for k in range(inner):
                    acc = acc + row[k] * b_data[k * cols + j]
                out[i * cols + j] = acc
    return out


def transpose_buffer(m: Any) -> Any:
    rows, cols = m.shape
    out = np.zeros(rows * cols, dtype=_dtypes.numpy_dtype(m.dtype))
    if m._data is None:
        return out
    for n, pos in enumerate(walk(m.begin(), m.end())):
        r, c = divmod(n, cols)
        out[c * rows + r] = pos.get()
    return out


def equal_buffers(a: Any, b: Any, token: str) -> bool:
    if a is None or b is None:
        return (a is None or len(a) == 0) and (b is None or len(b) == 0)
    eps = _dtypes.epsilon(token)
    if _dtypes.is_floating(token):
        with np.errstate(over="ignore", invalid="ignore"):
            for x, y in zip(a, b):
                if not abs(x - y) <= eps:
                    return False
        return True
    for x, y in zip(a, b):
        if x != y:
            return False
    return True

"""Dense row-major matrices over a closed set of numeric scalar kinds."""
from __future__ import annotations

try:
    from ._version import version as __version__
except ImportError:
    __version__ = "unknown"

from typing import Any

from ._internal import dtypes as _dtypes
from ._internal import formatting as _formatting
from ._internal import matrix as _matrix_mod
from ._internal import runtime as _runtime_mod
from . import errors
from ._internal.cursor import MatrixCursor
from .errors import (
    DimensionMismatch,
    DivideByZero,
    ErrorKind,
    IndexOutOfRange,
    NotSquare,
    PyDenseError,
    ShapeMismatch,
    TypeNotConvertible,
)
from ._internal.formatting import DebugSettings
from ._internal.matrix import (
    Float32Matrix,
    FloatMatrix,
    IntegerMatrix,
    Matrix,
    UInt32Matrix,
)
from ._internal.warnings import (
    PyDenseDTypeWarning,
    PyDenseOverflowRiskWarning,
    PyDenseWarning,
)

# Public dtype tokens (NumPy-like). These are simple sentinels accepted by
# Matrix constructors and conversions.
int8 = "int8"
int16 = "int16"
int32 = "int32"
int64 = "int64"
int_ = "int32"
uint8 = "uint8"
uint16 = "uint16"
uint32 = "uint32"
uint64 = "uint64"
uint = "uint32"
float16 = "float16"
float32 = "float32"
float64 = "float64"
float_ = "float64"
bool_ = "bool"

# Short aliases for the common scalar kinds.
IMatrix = IntegerMatrix
UMatrix = UInt32Matrix
FMatrix = Float32Matrix
DMatrix = FloatMatrix

# Process-wide seed for fill_random; None falls back to PYDENSE_SEED, then the clock.
seed: int | None = None

_runtime = _runtime_mod.Runtime(seed_getter=lambda: seed)
_matrix_mod.configure(runtime=_runtime)


def set_default_dtype(dtype: Any) -> None:
    """Set the dtype used when a Matrix is constructed without one."""
    _runtime.set_default_dtype(dtype)


def get_default_dtype() -> str:
    return _runtime.default_dtype()


def set_conversion_casting(policy: str) -> None:
    """Set the NumPy casting rule deciding which mixed-dtype operations are allowed.

    One of "no", "equiv", "safe", "same_kind" (default) or "unsafe".
    """
    _dtypes.set_conversion_casting(policy)


def get_conversion_casting() -> str:
    return _dtypes.get_conversion_casting()


def set_print_options(**options: Any) -> None:
    """Change the default DebugSettings used by ``str(matrix)``."""
    _formatting.configure(**options)


def get_print_options() -> DebugSettings:
    return _formatting.default_settings()


def matrix(source: Any, dtype: Any = None) -> Matrix:
    """Create a matrix from 2D data (nested sequence, NumPy array or matrix-like)."""
    if isinstance(source, Matrix):
        if dtype is not None:
            raise TypeError(
                "matrix(...) does not accept dtype when source is already a Matrix. "
                "Use convert_to(...) instead."
            )
        return source
    return Matrix.from_rows(source, dtype=dtype)


def identity(rows: Any, cols: Any = None, *, dtype: Any = None) -> Matrix:
    """Create a square identity matrix; raises NotSquare when ``rows != cols``."""
    return Matrix.identity(rows, cols, dtype=dtype)


def render(m: Matrix, settings: DebugSettings | None = None) -> str:
    return _formatting.render(m, settings)


__all__ = [
    "__version__",
    "Matrix",
    "IntegerMatrix",
    "UInt32Matrix",
    "Float32Matrix",
    "FloatMatrix",
    "IMatrix",
    "UMatrix",
    "FMatrix",
    "DMatrix",
    "MatrixCursor",
    "DebugSettings",
    "matrix",
    "identity",
    "render",
    "seed",
    "set_default_dtype",
    "get_default_dtype",
    "set_conversion_casting",
    "get_conversion_casting",
    "set_print_options",
    "get_print_options",
    "errors",
    "ErrorKind",
    "PyDenseError",
    "IndexOutOfRange",
    "ShapeMismatch",
    "DimensionMismatch",
    "NotSquare",
    "DivideByZero",
    "TypeNotConvertible",
    "PyDenseWarning",
    "PyDenseDTypeWarning",
    "PyDenseOverflowRiskWarning",
    "int8",
    "int16",
    "int32",
    "int64",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "float16",
    "float32",
    "float64",
    "bool_",
]

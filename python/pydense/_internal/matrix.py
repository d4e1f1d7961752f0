from __future__ import annotations

import itertools
import numbers
import warnings
from typing import Any, Callable, TextIO

import numpy as np

from . import algebra as _algebra
from . import dtypes as _dtypes
from . import formatting as _formatting
from . import ops as _ops
from . import random_fill as _random_fill
from .coercion import coerce_general_matrix
from .cursor import MatrixCursor
from ..errors import DivideByZero, IndexOutOfRange, NotSquare
from .runtime import Runtime
from .warnings import PyDenseDTypeWarning


_runtime: Runtime | None = None
_CLASS_FOR_DTYPE: dict[str, type] = {}


def configure(*, runtime: Runtime) -> None:
    global _runtime
    _runtime = runtime


def _require_runtime() -> Runtime:
    if _runtime is None:
        raise RuntimeError("pydense Matrix API not configured")
    return _runtime


def _as_dimension(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (numbers.Integral, float)):
        raise TypeError(f"{name} must be an integer; got {type(value).__name__}")
    if isinstance(value, float) and not value.is_integer():
        raise TypeError(f"{name} must be an integer; got {value!r}")
    n = int(value)
    if n < 0:
        raise ValueError(f"{name} must be non-negative; got {n}")
    return n


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (numbers.Number, np.generic)) and not isinstance(value, complex)


def _allocate(rows: int, cols: int, token: str) -> Any:
    if rows == 0 or cols == 0:
        return None
    return np.zeros(rows * cols, dtype=_dtypes.numpy_dtype(token))


def _convert_buffer(buffer: Any, src: str, dst: str, *, warn_lossy: bool, stacklevel: int = 2) -> Any:
    if buffer is None:
        return None
    if src == dst:
        return buffer.copy()
    if warn_lossy and _dtypes.is_floating(src) and not _dtypes.is_floating(dst):
        with np.errstate(invalid="ignore"):
            lossy = bool(np.any(buffer != np.trunc(buffer)))
        if lossy:
            warnings.warn(
                f"converting {src} to {dst} truncates fractional values",
                PyDenseDTypeWarning,
                stacklevel=stacklevel,
            )
    with np.errstate(invalid="ignore", over="ignore"):
        return buffer.astype(_dtypes.numpy_dtype(dst), casting="unsafe")


def _wrap(token: str, rows: int, cols: int, buffer: Any, like: Any = None) -> "Matrix":
    if like is not None and type(like)._accepts(token):
        klass = type(like)
    else:
        klass = _CLASS_FOR_DTYPE.get(token, Matrix)
    obj = object.__new__(klass)
    obj._dtype = token
    obj._rows = rows
    obj._cols = cols
    obj._data = buffer
    return obj


class Matrix(_formatting.MatrixMixin):
    """Dense row-major matrix of a single numeric scalar kind.

    ``Matrix(rows, cols=None, fill=0, *, dtype=None)`` allocates a
    zero-initialized ``rows x cols`` matrix (``cols=None`` makes it square)
    and, when ``fill`` is non-zero, sets every element to ``fill``.

    Constructing ``Matrix`` directly returns the typed subclass for the
    requested dtype where one exists (``FloatMatrix`` for float64,
    ``IntegerMatrix`` for int32, ...).

    Elementwise and scalar arithmetic, matrix multiplication and shape
    changes mutate in place. Operations that change the shape build a
    complete replacement buffer before swapping it in, so a failure leaves
    the matrix untouched.
    """

    _fixed_dtype: str | None = None

    def __new__(cls, rows: Any = 0, cols: Any = None, fill: Any = 0, *, dtype: Any = None):
        if cls is not Matrix:
            return super().__new__(cls)
        token = cls._resolve_dtype(dtype)
        return super().__new__(_CLASS_FOR_DTYPE.get(token, cls))

    def __init__(self, rows: Any = 0, cols: Any = None, fill: Any = 0, *, dtype: Any = None):
        r = _as_dimension(rows, "rows")
        c = r if cols is None else _as_dimension(cols, "cols")
        self._dtype = type(self)._resolve_dtype(dtype)
        self._rows = r
        self._cols = c
        self._data = _allocate(r, c, self._dtype)
        if self._data is not None and fill != 0:
            self.fill(fill)

    @classmethod
    def _resolve_dtype(cls, dtype: Any) -> str:
        if cls._fixed_dtype is not None:
            if dtype is not None and _dtypes.normalize_dtype(dtype) != cls._fixed_dtype:
                raise TypeError(
                    f"{cls.__name__} holds {cls._fixed_dtype}; dtype={dtype!r} is not accepted"
                )
            return cls._fixed_dtype
        if dtype is None:
            return _require_runtime().default_dtype()
        return _dtypes.require_dtype(dtype)

    @classmethod
    def _accepts(cls, token: str) -> bool:
        return cls._fixed_dtype is None or cls._fixed_dtype == token

    # --- alternate constructors ---

    @classmethod
    def from_rows(cls, data: Any, dtype: Any = None) -> "Matrix":
        """Build a matrix from a rectangular nested sequence or a 2D NumPy array."""
        rows, cols, values, source_dtype = coerce_general_matrix(data)
        if dtype is None and cls._fixed_dtype is None:
            token = _dtypes.normalize_dtype(source_dtype) if source_dtype is not None else None
            if token is None:
                token = _dtypes.infer_dtype(values)
            dtype = token
        m = cls(rows, cols, dtype=dtype)
        if m._data is not None:
            for n, value in enumerate(values):
                m._data[n] = _dtypes.cast_scalar(value, m._dtype)
        return m

    @classmethod
    def from_matrix(cls, other: "Matrix", dtype: Any = None) -> "Matrix":
        """Deep copy ``other``, converting every element to ``dtype``."""
        if not isinstance(other, Matrix):
            raise TypeError("from_matrix expects a Matrix")
        if cls._fixed_dtype is not None:
            token = cls._resolve_dtype(dtype)
        elif dtype is None:
            token = other._dtype
        else:
            token = _dtypes.require_dtype(dtype)
        buffer = _convert_buffer(other._data, other._dtype, token, warn_lossy=True, stacklevel=3)
        return _wrap(token, other._rows, other._cols, buffer, like=other)

    @classmethod
    def identity(cls, rows: Any, cols: Any = None, *, dtype: Any = None) -> "Matrix":
        r = _as_dimension(rows, "rows")
        c = r if cols is None else _as_dimension(cols, "cols")
        if r != c:
            raise NotSquare(f"identity requires a square shape; got ({r}, {c})")
        m = cls(r, c, dtype=dtype)
        m.to_identity()
        return m

    @classmethod
    def take(cls, source: "Matrix") -> "Matrix":
        """Move: return a matrix owning ``source``'s buffer and empty ``source``."""
        if not isinstance(source, Matrix):
            raise TypeError("take expects a Matrix")
        moved = _wrap(source._dtype, source._rows, source._cols, source._data, like=source)
        source._reset()
        return moved

    # --- lifecycle ---

    def copy(self) -> "Matrix":
        buffer = None if self._data is None else self._data.copy()
        return _wrap(self._dtype, self._rows, self._cols, buffer, like=self)

    def __copy__(self) -> "Matrix":
        return self.copy()

    def __deepcopy__(self, memo: dict) -> "Matrix":
        return self.copy()

    def swap(self, other: "Matrix") -> None:
        if not isinstance(other, Matrix):
            raise TypeError("swap expects a Matrix")
        if not (type(self)._accepts(other._dtype) and type(other)._accepts(self._dtype)):
            raise TypeError(
                f"cannot exchange state between {type(self).__name__} and {type(other).__name__}"
            )
        self._dtype, other._dtype = other._dtype, self._dtype
        self._rows, other._rows = other._rows, self._rows
        self._cols, other._cols = other._cols, self._cols
        self._data, other._data = other._data, self._data

    def move_assign(self, source: "Matrix") -> "Matrix":
        """Take over ``source``'s state; ``source`` is left empty."""
        if source is self:
            return self
        self.swap(source)
        source.clear()
        return self

    def assign(self, other: "Matrix") -> "Matrix":
        """Copy-assign: build a full copy of ``other`` first, then swap it in."""
        if other is self:
            return self
        if not isinstance(other, Matrix):
            raise TypeError("assign expects a Matrix")
        buffer = _convert_buffer(other._data, other._dtype, self._dtype, warn_lossy=True, stacklevel=3)
        tmp = _wrap(self._dtype, other._rows, other._cols, buffer, like=self)
        return self.move_assign(tmp)

    def _reset(self) -> None:
        self._data = None
        self._rows = 0
        self._cols = 0

    def clear(self) -> None:
        self._reset()

    close = clear

    def __enter__(self) -> "Matrix":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.clear()

    # --- storage & indexing ---

    def rows(self) -> int:
        return self._rows

    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> tuple[int, int]:
        return (self._rows, self._cols)

    @property
    def dtype(self) -> str:
        return self._dtype

    def size(self) -> int:
        return self._rows * self._cols

    def is_empty(self) -> bool:
        return self._rows == 0 or self._cols == 0

    def data_is_absent(self) -> bool:
        return self._data is None

    def get(self, row: int, col: int) -> Any:
        # Unchecked: callers guarantee 0 <= row < rows and 0 <= col < cols.
        return self._data[row * self._cols + col]

    def set(self, row: int, col: int, value: Any) -> None:
        self._data[row * self._cols + col] = value

    def _check_index(self, row: Any, col: Any) -> None:
        if not (isinstance(row, numbers.Integral) and isinstance(col, numbers.Integral)):
            raise TypeError("indices must be integers")
        if row < 0 or col < 0 or row >= self._rows or col >= self._cols:
            raise IndexOutOfRange(f"index ({row}, {col}) out of range for shape {self.shape}")

    def at(self, row: int, col: int) -> Any:
        self._check_index(row, col)
        return self.get(row, col)

    def set_at(self, row: int, col: int, value: Any) -> None:
        self._check_index(row, col)
        self.set(row, col, value)

    def __getitem__(self, key: Any) -> Any:
        if not (isinstance(key, tuple) and len(key) == 2):
            raise TypeError("matrix indices must be provided as [row, col]")
        return self.at(key[0], key[1])

    def __setitem__(self, key: Any, value: Any) -> None:
        if not (isinstance(key, tuple) and len(key) == 2):
            raise TypeError("matrix indices must be provided as [row, col]")
        self.set_at(key[0], key[1], value)

    # --- cursors ---

    def begin(self) -> MatrixCursor:
        return MatrixCursor(self._data, 0)

    def end(self) -> MatrixCursor:
        return MatrixCursor(self._data, 0 if self._data is None else len(self._data))

    def __iter__(self) -> MatrixCursor:
        return self.begin()

    # --- shape mutation ---

    def set_rows(self, rows: Any) -> None:
        self.resize(rows, self._cols)

    def set_cols(self, cols: Any) -> None:
        self.resize(self._rows, cols)

    def resize(self, rows: Any, cols: Any) -> None:
        """Change the shape, keeping the overlapping top-left block; new cells are zero."""
        r = _as_dimension(rows, "rows")
        c = _as_dimension(cols, "cols")
        if (r, c) == self.shape:
            return
        fresh = _allocate(r, c, self._dtype)
        if fresh is not None and self._data is not None:
            keep_cols = min(self._cols, c)
            for i in range(min(self._rows, r)):
                src = MatrixCursor(self._data, i * self._cols)
                dst = MatrixCursor(fresh, i * c)
                for j in range(keep_cols):
                    dst[j] = src[j]
        self._data = fresh
        self._rows = r
        self._cols = c

    # --- elementwise engine ---

    def _promote(self, op: Callable[..., Any]) -> Callable[..., Any]:
        # bool elements take part in arithmetic as 0/1 and are stored back as truth values.
        if _dtypes.is_bool(self._dtype):
            return lambda *xs: op(*(int(x) for x in xs))
        return op

    def _scalar(self, value: Any) -> Any:
        if not _is_scalar(value):
            raise TypeError(f"expected a real scalar; got {type(value).__name__}")
        return _dtypes.cast_scalar(value, self._dtype)

    def apply(self, op: Callable[[Any], Any]) -> "Matrix":
        """Replace every element ``x`` with ``op(x)``, in row-major order."""
        if self._data is not None:
            _algebra.apply_one(self.begin(), self.end(), self._promote(op))
        return self

    def apply_with(self, other: "Matrix", op: Callable[[Any, Any], Any]) -> "Matrix":
        """Replace every element ``x`` with ``op(x, y)`` where ``y`` is ``other`` at the same position."""
        if not isinstance(other, Matrix):
            raise TypeError("apply_with expects a Matrix")
        _ops.require_same_shape(self, other, op="apply_with")
        if other._dtype != self._dtype:
            _ops.require_convertible(other._dtype, self._dtype, op="apply_with")
        if self._data is None:
            return self
        rhs = _convert_buffer(other._data, other._dtype, self._dtype, warn_lossy=False)
        _algebra.apply_two(self.begin(), self.end(), MatrixCursor(rhs, 0), self._promote(op))
        return self

    def generate(self, producer: Callable[[], Any]) -> "Matrix":
        """Replace every element with a fresh ``producer()`` result, in row-major order."""
        if self._data is not None:
            _algebra.generate(self.begin(), self.end(), producer)
        return self

    def add(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return self.apply_with(other, lambda x, y: x + y)
        return self.apply(_algebra.add_scalar(self._promote_scalar(other)))

    def sub(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return self.apply_with(other, lambda x, y: x - y)
        return self.apply(_algebra.sub_scalar(self._promote_scalar(other)))

    def mul(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return self._matmul(other, stacklevel=4)
        return self.apply(_algebra.mul_scalar(self._promote_scalar(other)))

    def div(self, divisor: Any) -> "Matrix":
        if isinstance(divisor, Matrix):
            raise TypeError("division is defined for scalar divisors only")
        k = self._promote_scalar(divisor)
        integral = not _dtypes.is_floating(self._dtype)
        if integral and k == 0:
            raise DivideByZero(f"integral ({self._dtype}) matrix divided by zero")
        return self.apply(_algebra.div_scalar(k, integral=integral))

    def _promote_scalar(self, value: Any) -> Any:
        k = self._scalar(value)
        if _dtypes.is_bool(self._dtype):
            return int(k)
        return k

    def zero(self) -> "Matrix":
        return self.generate(_algebra.constant(_dtypes.cast_scalar(0, self._dtype)))

    def fill(self, value: Any) -> "Matrix":
        return self.generate(_algebra.constant(self._scalar(value)))

    def fill_random(
        self,
        low: Any,
        high: Any,
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> "Matrix":
        """Fill with independent uniform draws from ``[low, high]``.

        The engine is ``rng`` if given, else one seeded from ``seed``, the
        process-wide seed, or the wall clock, in that order.
        """
        if rng is None:
            rng = _require_runtime().make_rng(seed)
        producer = _random_fill.make_producer(self._dtype, low, high, rng)
        return self.generate(producer)

    def to_identity(self) -> "Matrix":
        if self._rows != self._cols:
            raise NotSquare(f"to_identity requires a square matrix; got {self.shape}")
        one = _dtypes.cast_scalar(1, self._dtype)
        zero = _dtypes.cast_scalar(0, self._dtype)
        stride = self._cols + 1
        positions = itertools.count()
        return self.generate(lambda: one if next(positions) % stride == 0 else zero)

    def _rounded(self, name: str) -> "Matrix":
        if _dtypes.is_floating(self._dtype):
            self.apply(_algebra.ROUNDING[name])
        return self

    def round(self) -> "Matrix":
        return self._rounded("round")

    def floor(self) -> "Matrix":
        return self._rounded("floor")

    def ceil(self) -> "Matrix":
        return self._rounded("ceil")

    def sum(self) -> Any:
        zero = _dtypes.cast_scalar(0, self._dtype)
        if self._data is None:
            return zero
        return _algebra.accumulate(self.begin(), self.end(), zero)

    def transpose(self) -> "Matrix":
        buffer = None if self._data is None else _ops.transpose_buffer(self)
        return _wrap(self._dtype, self._cols, self._rows, buffer, like=self)

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    # --- matrix multiplication ---

    def matmul(self, rhs: "Matrix") -> "Matrix":
        """Replace ``self`` with ``self @ rhs`` (shape ``(rows, rhs.cols)``)."""
        return self._matmul(rhs, stacklevel=4)

    def _matmul(self, rhs: "Matrix", *, stacklevel: int) -> "Matrix":
        # stacklevel points the overflow warning at the public caller.
        if not isinstance(rhs, Matrix):
            raise TypeError("matmul expects a Matrix")
        _ops.require_inner_match(self, rhs)
        if rhs._dtype != self._dtype:
            _ops.require_convertible(rhs._dtype, self._dtype, op="matmul")
        rhs_data = _convert_buffer(rhs._data, rhs._dtype, self._dtype, warn_lossy=False)
        _ops.overflow_preflight(
            self._dtype, self.shape, self._data, rhs.shape, rhs_data, stacklevel=stacklevel
        )
        rows, inner, cols = self._rows, self._cols, rhs._cols
        product = _ops.matmul_buffer(
            self._data, rows, inner, rhs_data, cols, _dtypes.numpy_dtype(self._dtype)
        )
        self._data = product if rows and cols else None
        self._cols = cols
        return self

    # --- comparison ---

    def equal_to(self, rhs: "Matrix") -> bool:
        """Epsilon-tolerant comparison; raises ShapeMismatch for different shapes."""
        if not isinstance(rhs, Matrix):
            raise TypeError("equal_to expects a Matrix")
        _ops.require_same_shape(self, rhs, op="equal_to")
        if rhs._dtype != self._dtype:
            _ops.require_convertible(rhs._dtype, self._dtype, op="equal_to")
        rhs_data = _convert_buffer(rhs._data, rhs._dtype, self._dtype, warn_lossy=False)
        return _ops.equal_buffers(self._data, rhs_data, self._dtype)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.equal_to(other)

    def __ne__(self, other: Any) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return not self.equal_to(other)

    __hash__ = None  # type: ignore[assignment]

    # --- operators ---

    def __add__(self, other: Any) -> "Matrix":
        if not (isinstance(other, Matrix) or _is_scalar(other)):
            return NotImplemented
        return self.copy().add(other)

    def __radd__(self, other: Any) -> "Matrix":
        if not _is_scalar(other):
            return NotImplemented
        return self.copy().add(other)

    def __iadd__(self, other: Any) -> "Matrix":
        if not (isinstance(other, Matrix) or _is_scalar(other)):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Any) -> "Matrix":
        if not (isinstance(other, Matrix) or _is_scalar(other)):
            return NotImplemented
        return self.copy().sub(other)

    def __isub__(self, other: Any) -> "Matrix":
        if not (isinstance(other, Matrix) or _is_scalar(other)):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, other: Any) -> "Matrix":
        if not (isinstance(other, Matrix) or _is_scalar(other)):
            return NotImplemented
        if isinstance(other, Matrix):
            return self.copy()._matmul(other, stacklevel=4)
        return self.copy().mul(other)

    def __rmul__(self, other: Any) -> "Matrix":
        if not _is_scalar(other):
            return NotImplemented
        return self.copy().mul(other)

    def __imul__(self, other: Any) -> "Matrix":
        if not (isinstance(other, Matrix) or _is_scalar(other)):
            return NotImplemented
        if isinstance(other, Matrix):
            return self._matmul(other, stacklevel=4)
        return self.mul(other)

    def __matmul__(self, other: Any) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.copy()._matmul(other, stacklevel=4)

    def __imatmul__(self, other: Any) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self._matmul(other, stacklevel=4)

    def __truediv__(self, other: Any) -> "Matrix":
        if not _is_scalar(other):
            return NotImplemented
        return self.copy().div(other)

    def __itruediv__(self, other: Any) -> "Matrix":
        if not _is_scalar(other):
            return NotImplemented
        return self.div(other)

    def __neg__(self) -> "Matrix":
        return self.copy().mul(-1)

    # --- conversion ---

    def convert_to(self, dtype: Any) -> "Matrix":
        token = _dtypes.require_dtype(dtype)
        buffer = _convert_buffer(self._data, self._dtype, token, warn_lossy=True, stacklevel=3)
        return _wrap(token, self._rows, self._cols, buffer)

    def to_list(self) -> list[Any]:
        if self._data is None:
            return []
        return self._data.tolist()

    def to_nested(self) -> list[list[Any]]:
        if self._data is None:
            return [[] for _ in range(self._rows)]
        flat = self._data.tolist()
        return [flat[i * self._cols : (i + 1) * self._cols] for i in range(self._rows)]

    def to_numpy(self) -> np.ndarray:
        if self._data is None:
            return np.zeros((self._rows, self._cols), dtype=_dtypes.numpy_dtype(self._dtype))
        return self._data.reshape(self._rows, self._cols).copy()

    # --- debug printing ---

    def print(self, stream: TextIO | None = None, settings: _formatting.DebugSettings | None = None) -> None:
        _formatting.print_matrix(self, stream, settings)


class IntegerMatrix(Matrix):
    _fixed_dtype = "int32"


class UInt32Matrix(Matrix):
    _fixed_dtype = "uint32"


class Float32Matrix(Matrix):
    _fixed_dtype = "float32"


class FloatMatrix(Matrix):
    _fixed_dtype = "float64"


_CLASS_FOR_DTYPE.update(
    {
        "int32": IntegerMatrix,
        "uint32": UInt32Matrix,
        "float32": Float32Matrix,
        "float64": FloatMatrix,
    }
)

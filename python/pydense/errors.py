"""PyDense error taxonomy.

Every failure a matrix operation can report has an ``ErrorKind``. The concrete
exception classes also derive from the closest builtin so ordinary handlers
(``except IndexError``, ``except ZeroDivisionError`` ...) keep working.
"""
from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    SHAPE_MISMATCH = "shape_mismatch"
    DIMENSION_MISMATCH = "dimension_mismatch"
    NOT_SQUARE = "not_square"
    DIVIDE_BY_ZERO = "divide_by_zero"
    TYPE_NOT_CONVERTIBLE = "type_not_convertible"


class PyDenseError(Exception):
    """Base class for all PyDense matrix errors."""

    kind: ErrorKind | None = None


class IndexOutOfRange(PyDenseError, IndexError):
    kind = ErrorKind.INDEX_OUT_OF_RANGE


class ShapeMismatch(PyDenseError, ValueError):
    kind = ErrorKind.SHAPE_MISMATCH


class DimensionMismatch(PyDenseError, ValueError):
    kind = ErrorKind.DIMENSION_MISMATCH


class NotSquare(PyDenseError, ValueError):
    kind = ErrorKind.NOT_SQUARE


class DivideByZero(PyDenseError, ZeroDivisionError):
    kind = ErrorKind.DIVIDE_BY_ZERO


class TypeNotConvertible(PyDenseError, TypeError):
    kind = ErrorKind.TYPE_NOT_CONVERTIBLE


def kind_of(exc: BaseException) -> ErrorKind | None:
    """Return the ``ErrorKind`` carried by ``exc``, or None for foreign errors."""
    return getattr(exc, "kind", None) if isinstance(exc, PyDenseError) else None

from __future__ import annotations

from typing import Any


class MatrixCursor:
    """A random-access position inside a matrix buffer.

    The cursor never copies: reads and writes go straight to the flat
    row-major buffer it was created over. Two cursors compare by offset and
    may only be compared or subtracted when they walk the same buffer.
    """

    __slots__ = ("_buffer", "_offset")

    def __init__(self, buffer: Any, offset: int = 0):
        self._buffer = buffer
        self._offset = int(offset)

    @property
    def buffer(self) -> Any:
        return self._buffer

    @property
    def offset(self) -> int:
        return self._offset

    def get(self) -> Any:
        return self._buffer[self._offset]

    def set(self, value: Any) -> None:
        self._buffer[self._offset] = value

    def __getitem__(self, n: int) -> Any:
        return self._buffer[self._offset + n]

    def __setitem__(self, n: int, value: Any) -> None:
        self._buffer[self._offset + n] = value

    # --- arithmetic ---

    def __add__(self, n: int) -> "MatrixCursor":
        return MatrixCursor(self._buffer, self._offset + int(n))

    __radd__ = __add__

    def __iadd__(self, n: int) -> "MatrixCursor":
        self._offset += int(n)
        return self

    def __sub__(self, other: Any) -> Any:
        if isinstance(other, MatrixCursor):
            self._require_same_buffer(other)
            return self._offset - other._offset
        return MatrixCursor(self._buffer, self._offset - int(other))

    def __isub__(self, n: int) -> "MatrixCursor":
        self._offset -= int(n)
        return self

    # --- comparison ---

    def _require_same_buffer(self, other: "MatrixCursor") -> None:
        if other._buffer is not self._buffer:
            raise ValueError("cursors walk different buffers")

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, MatrixCursor):
            return NotImplemented
        return other._buffer is self._buffer and other._offset == self._offset

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other: "MatrixCursor") -> bool:
        self._require_same_buffer(other)
        return self._offset < other._offset

    def __le__(self, other: "MatrixCursor") -> bool:
        self._require_same_buffer(other)
        return self._offset <= other._offset

    def __gt__(self, other: "MatrixCursor") -> bool:
        self._require_same_buffer(other)
        return self._offset > other._offset

    def __ge__(self, other: "MatrixCursor") -> bool:
        self._require_same_buffer(other)
        return self._offset >= other._offset

    __hash__ = None  # type: ignore[assignment]

    # --- iterator protocol ---

    def __iter__(self) -> "MatrixCursor":
        return self

    def __next__(self) -> Any:
        if self._buffer is None or self._offset >= len(self._buffer):
            raise StopIteration
        value = self._buffer[self._offset]
        self._offset += 1
        return value

    def __repr__(self) -> str:
        length = 0 if self._buffer is None else len(self._buffer)
        return f"MatrixCursor(offset={self._offset}, length={length})"


def walk(begin: MatrixCursor, end: MatrixCursor):
    """Yield successive cursors in ``[begin, end)``."""
    pos = MatrixCursor(begin.buffer, begin.offset)
    while pos.offset < end.offset:
        yield pos
        pos = pos + 1

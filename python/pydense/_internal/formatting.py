from __future__ import annotations

import dataclasses
import io
import sys
from dataclasses import dataclass
from typing import Any, TextIO

import numpy as np


@dataclass(frozen=True)
class DebugSettings:
    field_width: int = 8
    precision: int = 4
    element_separator: str = " "
    row_terminator: str = "\n"
    emit_trailing_blank_line: bool = False


_DEFAULT_SETTINGS = DebugSettings()


def configure(**options: Any) -> None:
    """Replace fields of the default settings used by ``str(matrix)``."""
    global _DEFAULT_SETTINGS
    unknown = set(options) - {f.name for f in dataclasses.fields(DebugSettings)}
    if unknown:
        raise TypeError(f"Unknown print option(s): {', '.join(sorted(unknown))}")
    _DEFAULT_SETTINGS = dataclasses.replace(_DEFAULT_SETTINGS, **options)


def default_settings() -> DebugSettings:
    return _DEFAULT_SETTINGS


def _format_value(value: Any, settings: DebugSettings) -> str:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        text = "1" if value else "0"
    elif isinstance(value, int):
        text = str(value)
    elif isinstance(value, float):
        text = f"{value:.{settings.precision}g}"
    else:
        text = str(value)
    return text.rjust(settings.field_width)


def write_matrix(matrix: Any, stream: TextIO, settings: DebugSettings) -> None:
    rows = matrix.rows()
    cols = matrix.cols()
    for i in range(rows):
        for j in range(cols):
            stream.write(_format_value(matrix.get(i, j), settings))
            stream.write(settings.element_separator)
        stream.write(settings.row_terminator)
    if settings.emit_trailing_blank_line:
        stream.write(settings.row_terminator)


def render(matrix: Any, settings: DebugSettings | None = None) -> str:
    out = io.StringIO()
    write_matrix(matrix, out, settings or _DEFAULT_SETTINGS)
    return out.getvalue()


def print_matrix(matrix: Any, stream: TextIO | None = None, settings: DebugSettings | None = None) -> None:
    write_matrix(matrix, stream if stream is not None else sys.stdout, settings or _DEFAULT_SETTINGS)


class MatrixMixin:
    def __str__(self) -> str:
        return render(self)

    def __repr__(self) -> str:
        shape = getattr(self, "shape", None)
        dtype = getattr(self, "dtype", None)
        return f"<{self.__class__.__name__} shape={shape} dtype={dtype}>"

from __future__ import annotations

import numbers
from typing import Any

import numpy as np


SUPPORTED_DTYPES = (
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
    "bool",
)

_ALIASES = {
    "i8": "int8",
    "i16": "int16",
    "i32": "int32",
    "int": "int32",
    "i64": "int64",
    "u8": "uint8",
    "u16": "uint16",
    "u32": "uint32",
    "uint": "uint32",
    "u64": "uint64",
    "f16": "float16",
    "half": "float16",
    "f32": "float32",
    "single": "float32",
    "float": "float64",
    "f64": "float64",
    "double": "float64",
    "bool_": "bool",
    "bit": "bool",
}

# Equality tolerance per scalar kind. Integral and bool compare exactly.
_EPSILON = {
    "float16": 1e-3,
    "float32": 1e-5,
    "float64": 1e-9,
}

_CASTING_POLICIES = ("no", "equiv", "safe", "same_kind", "unsafe")
_conversion_casting = "same_kind"


def normalize_dtype(dtype: Any) -> str | None:
    """Normalize user-provided dtype tokens into internal strings.

    Returns one of ``SUPPORTED_DTYPES`` or None.

    Accepted inputs include:
    - Case-insensitive strings: "int16", "INT16", "f32", "bool_", "double", ...
    - Python builtins: int, float, bool
    - NumPy dtypes/scalars: np.int16, np.dtype("int16"), np.float32, ...
    """

    if dtype is None:
        return None

    if dtype is int:
        return "int32"
    if dtype is float:
        return "float64"
    if dtype is bool:
        return "bool"

    if isinstance(dtype, str):
        s = dtype.strip().lower()
        if s in SUPPORTED_DTYPES:
            return s
        return _ALIASES.get(s)

    try:
        np_dtype = np.dtype(dtype)
    except TypeError:
        return None

    if np_dtype.kind == "b":
        return "bool"
    if np_dtype.kind in ("i", "u", "f"):
        name = np_dtype.name
        if name in SUPPORTED_DTYPES:
            return name
    return None


def require_dtype(dtype: Any) -> str:
    token = normalize_dtype(dtype)
    if token is None:
        raise TypeError(f"Unsupported dtype: {dtype!r}")
    return token


def numpy_dtype(token: str) -> np.dtype:
    return np.dtype(token)


def is_bool(token: str) -> bool:
    return token == "bool"


def is_integral(token: str) -> bool:
    return np.dtype(token).kind in ("i", "u")


def is_floating(token: str) -> bool:
    return np.dtype(token).kind == "f"


def epsilon(token: str) -> float:
    return _EPSILON.get(token, 0)


def infer_dtype(values: list[Any]) -> str:
    """Infer a dtype token for plain Python data (bool < int32 < float64)."""
    if values and all(isinstance(v, (bool, np.bool_)) for v in values):
        return "bool"
    if all(isinstance(v, (bool, int, np.bool_, np.integer)) for v in values):
        return "int32"
    return "float64"


def set_conversion_casting(policy: str) -> None:
    """Set the NumPy casting rule used to decide mixed-dtype convertibility."""
    global _conversion_casting
    if policy not in _CASTING_POLICIES:
        raise ValueError(
            f"casting policy must be one of {', '.join(_CASTING_POLICIES)}; got {policy!r}"
        )
    _conversion_casting = policy


def get_conversion_casting() -> str:
    return _conversion_casting


def can_convert(src: str, dst: str) -> bool:
    if src == dst:
        return True
    return bool(np.can_cast(np.dtype(src), np.dtype(dst), casting=_conversion_casting))


_INT64_MIN = -(1 << 63)
_UINT64_MAX = (1 << 64) - 1


def cast_scalar(value: Any, token: str) -> Any:
    """C-style conversion of a Python/NumPy scalar to the given dtype.

    Integers stored into an integral dtype keep their low-order bits
    (``2**32 + 5`` becomes ``5`` in int32, ``-1`` becomes ``255`` in uint8).
    Integers that no 64-bit type can hold raise ValueError.
    """
    dt = np.dtype(token)
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        v = int(value)
        if not _INT64_MIN <= v <= _UINT64_MAX:
            raise ValueError(f"{v} does not fit in a 64-bit integer and cannot be stored as {token}")
        if dt.kind in "iu":
            bits = dt.itemsize * 8
            v &= (1 << bits) - 1
            if dt.kind == "i" and v >= 1 << (bits - 1):
                v -= 1 << bits
            return dt.type(v)
    return np.asarray(value).astype(dt, casting="unsafe")[()]

from __future__ import annotations

from typing import Any, Callable

import numpy as np

from . import dtypes as _dtypes


def make_producer(token: str, low: Any, high: Any, rng: np.random.Generator) -> Callable[[], Any]:
    """Return a zero-argument producer drawing uniformly from ``[low, high]``.

    Integral and bool dtypes draw from the integer distribution (both ends
    inclusive); floating dtypes draw from the real distribution and are
    clipped to the bounds as stored in the target dtype.
    """
    if low > high:
        raise ValueError(f"fill_random: low ({low}) must not exceed high ({high})")

    np_dtype = _dtypes.numpy_dtype(token)

    if _dtypes.is_bool(token):
        lo, hi = int(bool(low)), int(bool(high))
        return lambda: bool(rng.integers(lo, hi, endpoint=True))

    if _dtypes.is_integral(token):
        lo, hi = int(low), int(high)
        return lambda: rng.integers(lo, hi, endpoint=True, dtype=np_dtype)

    lo_t = np_dtype.type(low)
    hi_t = np_dtype.type(high)
    lo_f, hi_f = float(low), float(high)

    def draw() -> Any:
        value = np_dtype.type(rng.uniform(lo_f, hi_f))
        if value < lo_t:
            return lo_t
        if value > hi_t:
            return hi_t
        return value

    return draw

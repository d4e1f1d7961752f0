from __future__ import annotations

import os
import time
from typing import Any, Callable

import numpy as np

from .dtypes import require_dtype


class Runtime:
    """Process-wide settings: default dtype and the random engine source."""

    def __init__(
        self,
        *,
        seed_getter: Callable[[], int | None],
        seed_env_var: str = "PYDENSE_SEED",
        dtype_env_var: str = "PYDENSE_DEFAULT_DTYPE",
    ) -> None:
        self._seed_getter = seed_getter
        self._seed_env_var = seed_env_var
        self._dtype_env_var = dtype_env_var
        self._default_dtype: str | None = None

    def default_dtype(self) -> str:
        if self._default_dtype is not None:
            return self._default_dtype

        env = os.environ.get(self._dtype_env_var)
        if env:
            self._default_dtype = require_dtype(env)
        else:
            self._default_dtype = "float64"
        return self._default_dtype

    def set_default_dtype(self, dtype: Any) -> None:
        self._default_dtype = require_dtype(dtype)

    def seed(self) -> int | None:
        value = self._seed_getter()
        if value is not None:
            return int(value)

        env = os.environ.get(self._seed_env_var)
        if env:
            try:
                return int(env)
            except ValueError as exc:
                raise ValueError(f"{self._seed_env_var} must be an integer; got {env!r}") from exc
        return None

    def make_rng(self, seed: int | None = None) -> np.random.Generator:
        if seed is None:
            seed = self.seed()
        if seed is None:
            seed = time.time_ns()
        return np.random.default_rng(seed)

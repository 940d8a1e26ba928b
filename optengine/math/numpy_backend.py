"""NumPy implementation of the backend contract.

Also serves Python scalars, which NumPy treats as 0-d values.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from .base import Backend, SingularMatrixError


class NumpyBackend(Backend):
    name = "numpy"

    def dot(self, a: Any, b: Any) -> float:
        return float(np.vdot(a, b).real)

    def add(self, a: Any, b: Any) -> Any:
        return np.add(a, b)

    def sub(self, a: Any, b: Any) -> Any:
        return np.subtract(a, b)

    def mul(self, a: Any, b: Any) -> Any:
        return np.multiply(a, b)

    def div(self, a: Any, b: Any) -> Any:
        return np.divide(a, b)

    def scale(self, a: Any, factor: float) -> Any:
        return np.multiply(a, factor)

    def norm(self, a: Any) -> float:
        return float(np.linalg.norm(np.atleast_1d(a)))

    def zeros_like(self, a: Any) -> Any:
        return np.zeros_like(a)

    def eye(self, n: int, like: Optional[Any] = None) -> Any:
        dtype = np.asarray(like).dtype if like is not None else float
        if not np.issubdtype(dtype, np.inexact):
            dtype = float
        return np.eye(n, dtype=dtype)

    def transpose(self, a: Any) -> Any:
        return np.transpose(a)

    def matvec(self, m: Any, v: Any) -> Any:
        return np.asarray(m) @ np.asarray(v)

    def outer(self, a: Any, b: Any) -> Any:
        return np.outer(a, b)

    def matmul(self, a: Any, b: Any) -> Any:
        return np.asarray(a) @ np.asarray(b)

    def inv(self, m: Any) -> Any:
        try:
            return np.linalg.inv(m)
        except np.linalg.LinAlgError as exc:
            raise SingularMatrixError(str(exc)) from exc

    def solve(self, m: Any, v: Any) -> Any:
        try:
            return np.linalg.solve(m, v)
        except np.linalg.LinAlgError as exc:
            raise SingularMatrixError(str(exc)) from exc

    def conj(self, a: Any) -> Any:
        return np.conj(a)

    def minimum(self, a: Any, b: Any) -> Any:
        return np.minimum(a, b)

    def maximum(self, a: Any, b: Any) -> Any:
        return np.maximum(a, b)

    def rand_from_range(self, low: Any, high: Any, rng: Any = None) -> Any:
        rng = rng if rng is not None else np.random.default_rng()
        low = np.asarray(low, dtype=float)
        high = np.asarray(high, dtype=float)
        lo = np.minimum(low, high)
        hi = np.maximum(low, high)
        return lo + (hi - lo) * rng.random(lo.shape)

    def copy(self, a: Any) -> Any:
        return np.copy(a)


__all__ = ["NumpyBackend"]

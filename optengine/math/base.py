"""Arithmetic contract shared by solvers.

Solvers only talk to parameters, gradients and Hessians through a
:class:`Backend`, so the same algorithm runs on NumPy arrays, torch tensors or
plain floats.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class SingularMatrixError(ArithmeticError):
    """Raised when a matrix cannot be inverted or a system cannot be solved."""


class Backend(ABC):
    """Vector/matrix operations over one family of representations."""

    name: str = "backend"

    @abstractmethod
    def dot(self, a: Any, b: Any) -> float:
        """Inner product of two vectors as a Python float."""

    def weighted_dot(self, a: Any, w: Any, b: Any) -> float:
        """a^T W b."""
        return self.dot(a, self.matvec(w, b))

    @abstractmethod
    def add(self, a: Any, b: Any) -> Any:
        ...

    @abstractmethod
    def sub(self, a: Any, b: Any) -> Any:
        ...

    @abstractmethod
    def mul(self, a: Any, b: Any) -> Any:
        """Pointwise product."""

    @abstractmethod
    def div(self, a: Any, b: Any) -> Any:
        """Pointwise quotient."""

    @abstractmethod
    def scale(self, a: Any, factor: float) -> Any:
        ...

    def scaled_add(self, a: Any, factor: float, b: Any) -> Any:
        """a + factor * b."""
        return self.add(a, self.scale(b, factor))

    def scaled_sub(self, a: Any, factor: float, b: Any) -> Any:
        """a - factor * b."""
        return self.sub(a, self.scale(b, factor))

    @abstractmethod
    def norm(self, a: Any) -> float:
        """Euclidean norm as a Python float."""

    @abstractmethod
    def zeros_like(self, a: Any) -> Any:
        ...

    @abstractmethod
    def eye(self, n: int, like: Optional[Any] = None) -> Any:
        ...

    def eye_like(self, a: Any) -> Any:
        """Identity with the dimension of vector or square matrix ``a``."""
        n = a.shape[0] if getattr(a, "ndim", 0) > 0 else 1
        return self.eye(n, like=a)

    @abstractmethod
    def transpose(self, a: Any) -> Any:
        ...

    @abstractmethod
    def matvec(self, m: Any, v: Any) -> Any:
        ...

    @abstractmethod
    def outer(self, a: Any, b: Any) -> Any:
        ...

    @abstractmethod
    def matmul(self, a: Any, b: Any) -> Any:
        ...

    @abstractmethod
    def inv(self, m: Any) -> Any:
        """Matrix inverse. Raises SingularMatrixError."""

    @abstractmethod
    def solve(self, m: Any, v: Any) -> Any:
        """Solve m x = v. Raises SingularMatrixError."""

    @abstractmethod
    def conj(self, a: Any) -> Any:
        ...

    @abstractmethod
    def minimum(self, a: Any, b: Any) -> Any:
        ...

    @abstractmethod
    def maximum(self, a: Any, b: Any) -> Any:
        ...

    @abstractmethod
    def rand_from_range(self, low: Any, high: Any, rng: Any = None) -> Any:
        """Uniform sample between ``low`` and ``high`` (elementwise)."""

    @abstractmethod
    def copy(self, a: Any) -> Any:
        ...

    def to_float(self, value: Any) -> float:
        return float(value)


__all__ = ["Backend", "SingularMatrixError"]

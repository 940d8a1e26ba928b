"""PyTorch implementation of the backend contract.

Operations run without autograd tracking; gradients are supplied by the
objective, not derived by the engine.
"""

from __future__ import annotations

from typing import Any, Optional

import torch

from .base import Backend, SingularMatrixError


class TorchBackend(Backend):
    name = "torch"

    @torch.no_grad()
    def dot(self, a: torch.Tensor, b: torch.Tensor) -> float:
        return float(torch.vdot(a.reshape(-1), b.reshape(-1)).real)

    @torch.no_grad()
    def add(self, a: Any, b: Any) -> torch.Tensor:
        return torch.add(a, b)

    @torch.no_grad()
    def sub(self, a: Any, b: Any) -> torch.Tensor:
        return torch.sub(a, b)

    @torch.no_grad()
    def mul(self, a: Any, b: Any) -> torch.Tensor:
        return torch.mul(a, b)

    @torch.no_grad()
    def div(self, a: Any, b: Any) -> torch.Tensor:
        return torch.div(a, b)

    @torch.no_grad()
    def scale(self, a: torch.Tensor, factor: float) -> torch.Tensor:
        return a * factor

    @torch.no_grad()
    def norm(self, a: torch.Tensor) -> float:
        return float(torch.linalg.vector_norm(a))

    def zeros_like(self, a: torch.Tensor) -> torch.Tensor:
        return torch.zeros_like(a)

    def eye(self, n: int, like: Optional[torch.Tensor] = None) -> torch.Tensor:
        if like is None:
            return torch.eye(n, dtype=torch.get_default_dtype())
        dtype = like.dtype if like.is_floating_point() or like.is_complex() else None
        return torch.eye(n, dtype=dtype, device=like.device)

    def transpose(self, a: torch.Tensor) -> torch.Tensor:
        return a.transpose(-2, -1) if a.dim() >= 2 else a

    @torch.no_grad()
    def matvec(self, m: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        return m @ v

    @torch.no_grad()
    def outer(self, a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
        return torch.outer(a, b)

    @torch.no_grad()
    def matmul(self, a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
        return a @ b

    @torch.no_grad()
    def inv(self, m: torch.Tensor) -> torch.Tensor:
        inverse, info = torch.linalg.inv_ex(m)
        if int(info.max()) != 0:
            raise SingularMatrixError("Matrix is singular")
        return inverse

    @torch.no_grad()
    def solve(self, m: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        solution, info = torch.linalg.solve_ex(m, v)
        if int(info.max()) != 0:
            raise SingularMatrixError("Matrix is singular")
        return solution

    def conj(self, a: torch.Tensor) -> torch.Tensor:
        return torch.conj(a).resolve_conj()

    def minimum(self, a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
        return torch.minimum(a, b)

    def maximum(self, a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
        return torch.maximum(a, b)

    def rand_from_range(
        self, low: torch.Tensor, high: torch.Tensor, rng: Optional[torch.Generator] = None
    ) -> torch.Tensor:
        lo = torch.minimum(low, high)
        hi = torch.maximum(low, high)
        sample = torch.rand(lo.shape, generator=rng, dtype=lo.dtype, device=lo.device)
        return lo + (hi - lo) * sample

    def copy(self, a: torch.Tensor) -> torch.Tensor:
        return a.detach().clone()

    def to_float(self, value: Any) -> float:
        if isinstance(value, torch.Tensor):
            return float(value.detach())
        return float(value)


__all__ = ["TorchBackend"]

"""Newton's method."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.errors import InvalidParameterError
from ..core.kv import KV
from ..core.problem import Problem
from ..core.solver import Solver, SolverOutput
from ..core.state import IterState
from ..core.termination import TerminationReason
from ..math import SingularMatrixError, get_backend


@dataclass(frozen=True)
class NewtonData:
    singular: bool = False


class Newton(Solver):
    """
    Newton iteration x <- x - gamma * H(x)^-1 grad(x).

    A singular Hessian stops the run with ``SINGULAR_MATRIX``; the state keeps
    the last parameter.

    Args:
        gamma: Step length in (0, 1].
        tol_grad: Converged when the gradient norm drops to this value.
    """

    name = "Newton method"

    def __init__(self, gamma: float = 1.0, tol_grad: float = 1e-10) -> None:
        if not (0.0 < gamma <= 1.0):
            raise InvalidParameterError("Newton: gamma must be in (0, 1].")
        if tol_grad < 0:
            raise InvalidParameterError("Newton: tol_grad must be non-negative.")
        self.gamma = gamma
        self.tol_grad = tol_grad

    def init(self, problem: Problem, state: IterState) -> SolverOutput:
        if state.param is None:
            raise InvalidParameterError("Newton: initial parameter not set")
        state.set_cost(problem.cost(state.param))
        return state.with_extension(NewtonData()), None

    def next_iter(self, problem: Problem, state: IterState) -> SolverOutput:
        backend = get_backend(state.param)
        grad = problem.gradient(state.param)
        hessian = problem.hessian(state.param)
        state.set_gradient(grad).set_hessian(hessian)
        try:
            step = backend.solve(hessian, grad)
        except SingularMatrixError:
            return state.with_extension(NewtonData(singular=True)), None
        new_param = backend.scaled_sub(state.param, self.gamma, step)
        state.set_param(new_param).set_cost(problem.cost(new_param))
        return state.with_extension(NewtonData()), KV().set(
            "gradient_norm", backend.norm(grad)
        )

    def terminate_internally(self, state: IterState) -> Optional[TerminationReason]:
        data = state.extension
        if isinstance(data, NewtonData) and data.singular:
            return TerminationReason.SINGULAR_MATRIX
        if state.grad is not None and get_backend(state.grad).norm(state.grad) <= self.tol_grad:
            return TerminationReason.SOLVER_CONVERGED
        return None

    def to_kv(self) -> KV:
        return KV().set("gamma", self.gamma).set("tol_grad", self.tol_grad)


__all__ = ["Newton", "NewtonData"]

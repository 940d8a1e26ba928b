"""Steepest descent with a line search."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..core.errors import InvalidParameterError
from ..core.kv import KV
from ..core.problem import Problem
from ..core.solver import Solver, SolverOutput
from ..core.state import IterState
from ..core.termination import TerminationReason
from ..math import get_backend
from .linesearch.base import LineSearch, line_search_failed, run_line_search


@dataclass(frozen=True)
class DescentData:
    """Outcome of the latest line search."""

    linesearch_reason: Optional[TerminationReason] = None
    linesearch_failed: bool = False


class SteepestDescent(Solver):
    """
    Move along the negative gradient, with step lengths from ``linesearch``.

    Args:
        linesearch: Line-search solver run once per iteration.
        tol_grad: Converged when the gradient norm drops to this value.
        max_linesearch_iters: Iteration budget of each line search.
    """

    name = "Steepest Descent"

    def __init__(
        self,
        linesearch: LineSearch,
        tol_grad: float = 1e-8,
        max_linesearch_iters: int = 20,
    ) -> None:
        if not isinstance(linesearch, LineSearch):
            raise InvalidParameterError("linesearch must be a LineSearch solver")
        if tol_grad < 0:
            raise InvalidParameterError("tol_grad must be non-negative")
        if max_linesearch_iters < 1:
            raise InvalidParameterError("max_linesearch_iters must be positive")
        self.linesearch = linesearch
        self.tol_grad = tol_grad
        self.max_linesearch_iters = max_linesearch_iters

    def init(self, problem: Problem, state: IterState) -> SolverOutput:
        if state.param is None:
            raise InvalidParameterError(f"{self.name}: initial parameter not set")
        if not math.isfinite(state.cost):
            state.set_cost(problem.cost(state.param))
        if state.grad is None:
            state.set_gradient(problem.gradient(state.param))
        return state.with_extension(DescentData()), None

    def next_iter(self, problem: Problem, state: IterState) -> SolverOutput:
        backend = get_backend(state.param)
        direction = backend.scale(state.grad, -1.0)
        result = run_line_search(
            problem,
            self.linesearch,
            state.param,
            direction,
            cost=state.cost,
            grad=state.grad,
            max_iters=self.max_linesearch_iters,
        )
        failed = line_search_failed(result, state.cost)
        new_param = result.state.param
        state.set_param(new_param).set_cost(result.state.cost)
        state.set_gradient(problem.gradient(new_param))
        state.with_extension(DescentData(result.reason, failed))
        kv = KV().set("gradient_norm", backend.norm(state.grad))
        return state, kv

    def terminate_internally(self, state: IterState) -> Optional[TerminationReason]:
        data = state.extension
        if isinstance(data, DescentData) and data.linesearch_failed:
            return TerminationReason.LINE_SEARCH_FAILED
        if state.grad is not None and get_backend(state.grad).norm(state.grad) <= self.tol_grad:
            return TerminationReason.SOLVER_CONVERGED
        return None

    def to_kv(self) -> KV:
        return KV.from_pairs(
            ("linesearch", self.linesearch.name),
            ("tol_grad", self.tol_grad),
            ("max_linesearch_iters", self.max_linesearch_iters),
        )


__all__ = ["DescentData", "SteepestDescent"]

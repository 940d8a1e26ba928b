"""Backtracking line search with the Armijo sufficient-decrease condition."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from ...core.errors import InvalidParameterError
from ...core.kv import KV
from ...core.problem import Problem
from ...core.solver import SolverOutput
from ...core.state import IterState
from ...core.termination import TerminationReason
from ...math import get_backend
from .base import LineSearch


@dataclass(frozen=True)
class BacktrackingData:
    init_param: Any
    direction: Any
    init_cost: float
    slope: float
    alpha: float


class BacktrackingLineSearch(LineSearch):
    """
    Shrink the step by ``rho`` until f(x + a p) <= f(x) + c a grad(x)^T p.

    Args:
        rho: Contraction factor in (0, 1).
        c: Armijo constant in (0, 1).
    """

    name = "Backtracking line search"

    def __init__(self, rho: float = 0.5, c: float = 1e-4) -> None:
        if not (0 < c < 1):
            raise InvalidParameterError("Armijo constant c must lie in (0, 1)")
        if not (0 < rho < 1):
            raise InvalidParameterError("rho must lie in (0, 1)")
        self.rho = rho
        self.c = c

    def init(self, problem: Problem, state: IterState) -> SolverOutput:
        inputs = self._input(state)
        backend = get_backend(state.param)
        cost, _, slope = self._initial_values(problem, state, backend, inputs.direction)
        data = BacktrackingData(
            init_param=state.param,
            direction=inputs.direction,
            init_cost=cost,
            slope=slope,
            alpha=float(inputs.init_alpha),
        )
        return self._try(problem, state, data), None

    def next_iter(self, problem: Problem, state: IterState) -> SolverOutput:
        data = replace(state.extension, alpha=state.extension.alpha * self.rho)
        return self._try(problem, state, data), KV().set("alpha", data.alpha)

    def _try(self, problem: Problem, state: IterState, data: BacktrackingData) -> IterState:
        backend = get_backend(data.init_param)
        candidate = backend.scaled_add(data.init_param, data.alpha, data.direction)
        cost = problem.cost(candidate)
        return state.set_param(candidate).set_cost(cost).with_extension(data)

    def terminate_internally(self, state: IterState) -> Optional[TerminationReason]:
        data = state.extension
        if not isinstance(data, BacktrackingData):
            return None
        if state.cost <= data.init_cost + self.c * data.alpha * data.slope:
            return TerminationReason.LINE_SEARCH_CONDITION_MET
        return None

    def to_kv(self) -> KV:
        return KV().set("rho", self.rho).set("c", self.c)


__all__ = ["BacktrackingData", "BacktrackingLineSearch"]

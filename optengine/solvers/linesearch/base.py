"""Shared pieces of the line-search solvers."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from ...core.errors import NotInitializedError, SolverError
from ...core.executor import Executor
from ...core.problem import Problem
from ...core.result import OptimizationResult
from ...core.solver import Solver
from ...core.state import IterState
from ...core.termination import Budget, TerminationReason
from ...math import Backend


@dataclass(frozen=True)
class LineSearchInput:
    """Initial ``extension`` of a line-search state.

    Attributes:
        direction: Search direction; must be a descent direction.
        init_alpha: First step length to try.
    """

    direction: Any
    init_alpha: float = 1.0


class LineSearch(Solver):
    """Base class of solvers that search a step length along a direction."""

    def _input(self, state: IterState) -> LineSearchInput:
        if not isinstance(state.extension, LineSearchInput):
            raise NotInitializedError(
                f"{self.name}: initial state must carry a LineSearchInput extension"
            )
        if state.param is None:
            raise NotInitializedError(f"{self.name}: initial parameter not set")
        return state.extension

    @staticmethod
    def _initial_values(
        problem: Problem, state: IterState, backend: Backend, direction: Any
    ) -> tuple[float, Any, float]:
        """Return (cost, gradient, directional derivative) at the start point."""
        cost = state.cost if math.isfinite(state.cost) else float(problem.cost(state.param))
        grad = state.grad if state.grad is not None else problem.gradient(state.param)
        slope = backend.dot(grad, direction)
        if not slope < 0:
            raise SolverError("Search direction must be a descent direction.")
        return cost, grad, slope


def run_line_search(
    problem: Problem,
    linesearch: LineSearch,
    param: Any,
    direction: Any,
    cost: float = math.inf,
    grad: Any = None,
    init_alpha: float = 1.0,
    max_iters: int = 20,
) -> OptimizationResult:
    """Run ``linesearch`` from ``param`` along ``direction`` on ``problem``.

    Evaluations are charged to ``problem``, so they show up in the counts of
    the run that called this.
    """
    state = IterState(
        param=param,
        cost=cost,
        grad=grad,
        extension=LineSearchInput(direction, init_alpha),
    )
    executor = Executor(
        problem,
        linesearch,
        state,
        budget=Budget(max_iters=max_iters),
        timer=False,
        log_level=logging.DEBUG,
    )
    return executor.run()


def line_search_failed(result: OptimizationResult, start_cost: float) -> bool:
    """True if the search neither met its condition nor decreased the cost."""
    met = result.reason is TerminationReason.LINE_SEARCH_CONDITION_MET
    return not met and not result.state.cost < start_cost


__all__ = ["LineSearch", "LineSearchInput", "line_search_failed", "run_line_search"]

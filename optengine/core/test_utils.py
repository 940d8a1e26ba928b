"""Small objectives and solvers for exercising the engine in tests.

They live inside the package so checkpoints containing them can be pickled
and restored from any test module.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np

from .kv import KV
from .problem import Problem
from .solver import Solver, SolverOutput
from .state import IterState
from .termination import TerminationReason


class Quadratic:
    """f(x) = sum(x**2) with gradient 2x and Hessian 2I."""

    def cost(self, params: Any) -> float:
        x = np.asarray(params, dtype=float)
        return float(np.sum(x * x))

    def gradient(self, params: Any) -> Any:
        return 2.0 * np.asarray(params, dtype=float)

    def hessian(self, params: Any) -> np.ndarray:
        x = np.atleast_1d(np.asarray(params, dtype=float))
        return 2.0 * np.eye(x.size)


class FailingGradient(Quadratic):
    """Quadratic whose gradient raises from the ``fail_at``-th call onwards."""

    def __init__(self, fail_at: int = 1) -> None:
        self.fail_at = fail_at
        self.calls = 0

    def gradient(self, params: Any) -> Any:
        self.calls += 1
        if self.calls >= self.fail_at:
            raise RuntimeError(f"gradient unavailable (call {self.calls})")
        return super().gradient(params)


class HalvingSolver(Solver):
    """Moves the parameter to half its value each iteration.

    Args:
        use_gradient: Also evaluate the gradient at the old parameter.
        stop_at_iter: Report ``SOLVER_CONVERGED`` from this iteration on.
    """

    name = "Halving"

    def __init__(self, use_gradient: bool = False, stop_at_iter: Optional[int] = None) -> None:
        self.use_gradient = use_gradient
        self.stop_at_iter = stop_at_iter

    def init(self, problem: Problem, state: IterState) -> SolverOutput:
        if state.param is None:
            raise ValueError("HalvingSolver needs an initial parameter")
        state.set_cost(problem.cost(state.param))
        return state, KV().set("use_gradient", self.use_gradient)

    def next_iter(self, problem: Problem, state: IterState) -> SolverOutput:
        if self.use_gradient:
            state.set_gradient(problem.gradient(state.param))
        new_param = state.param / 2
        state.set_param(new_param).set_cost(problem.cost(new_param))
        return state, KV().set("step", state.iter + 1)

    def terminate_internally(self, state: IterState) -> Optional[TerminationReason]:
        if self.stop_at_iter is not None and state.iter >= self.stop_at_iter:
            return TerminationReason.SOLVER_CONVERGED
        return None

    def to_kv(self) -> KV:
        return KV().set("stop_at_iter", self.stop_at_iter)


class ScheduleSolver(Solver):
    """Visits a fixed sequence of parameters, one per iteration.

    Handy for producing costs that go up and down. Iteration ``k`` moves to
    ``schedule[k % len(schedule)]``.
    """

    name = "Schedule"

    def __init__(self, schedule: Sequence[Any]) -> None:
        if len(schedule) == 0:
            raise ValueError("schedule must not be empty")
        self.schedule = list(schedule)

    def init(self, problem: Problem, state: IterState) -> SolverOutput:
        state.set_cost(problem.cost(state.param))
        return state, None

    def next_iter(self, problem: Problem, state: IterState) -> SolverOutput:
        new_param = self.schedule[state.iter % len(self.schedule)]
        state.set_param(new_param).set_cost(problem.cost(new_param))
        return state, None


__all__ = ["FailingGradient", "HalvingSolver", "Quadratic", "ScheduleSolver"]

"""Termination reasons, budgets and the termination policy."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Tuple

if TYPE_CHECKING:
    from .state import IterState


class TerminationReason(Enum):
    """Why a run stopped. ``None`` stands for "continue" everywhere."""

    MAX_ITERS_REACHED = "Maximum number of iterations reached"
    TARGET_COST_REACHED = "Reached target cost"
    TIMED_OUT = "Timeout reached"
    NO_CHANGE_IN_COST = "No change in cost function value"
    CONDITION_MET = "Termination condition met"
    ABORTED = "Optimization aborted"
    LINE_SEARCH_CONDITION_MET = "Line search condition met"
    LINE_SEARCH_FAILED = "Line search failed"
    SINGULAR_MATRIX = "Singular matrix encountered"
    SOLVER_CONVERGED = "Solver converged"
    TARGET_PRECISION_REACHED = "Reached target precision"

    @property
    def text(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


CRITERIA = (
    "solver",
    "max_iters",
    "max_time",
    "target_cost",
    "no_change",
    "condition",
    "cancelled",
)


@dataclass(frozen=True)
class Budget:
    """
    Limits checked after every iteration.

    Args:
        max_iters: Maximum number of completed iterations. None means
            unlimited.
        max_time: Maximum wall-clock seconds. Only checked between
            iterations, so a slow iteration can overrun it.
        target_cost: Stop once the current or best cost is at or below this
            value.
        patience: Stop after this many consecutive iterations without
            improvement of the best cost. None disables the check.
        min_delta: Minimum decrease of the best cost that resets the patience
            counter.
        condition: Optional predicate on the state; stops the run when it
            returns True.
        order: Precedence of the criteria, first match wins. Must be a
            permutation of ``CRITERIA``.
    """

    max_iters: Optional[int] = None
    max_time: Optional[float] = None
    target_cost: float = -math.inf
    patience: Optional[int] = None
    min_delta: float = 0.0
    condition: Optional[Callable[["IterState"], bool]] = None
    order: Tuple[str, ...] = CRITERIA

    def __post_init__(self) -> None:
        if self.max_iters is not None and self.max_iters < 0:
            raise ValueError(f"max_iters must be non-negative, got {self.max_iters}")
        if self.max_time is not None and self.max_time < 0:
            raise ValueError(f"max_time must be non-negative, got {self.max_time}")
        if self.patience is not None and self.patience <= 0:
            raise ValueError(f"patience must be positive, got {self.patience}")
        if self.min_delta < 0:
            raise ValueError(f"min_delta must be non-negative, got {self.min_delta}")
        object.__setattr__(self, "order", tuple(self.order))
        if sorted(self.order) != sorted(CRITERIA):
            raise ValueError(
                f"order must be a permutation of {CRITERIA}, got {self.order}"
            )


class TerminationPolicy:
    """Evaluates a :class:`Budget` against a state.

    The evaluation is a pure function of its arguments: the policy keeps no
    state between calls.
    """

    def __init__(self, budget: Optional[Budget] = None) -> None:
        self.budget = budget if budget is not None else Budget()

    def evaluate(
        self,
        state: "IterState",
        solver_reason: Optional[TerminationReason] = None,
        cancelled: bool = False,
    ) -> Optional[TerminationReason]:
        """Return the first reason that fires in budget order, else None."""
        for criterion in self.budget.order:
            reason = self._check(criterion, state, solver_reason, cancelled)
            if reason is not None:
                return reason
        return None

    def _check(
        self,
        criterion: str,
        state: "IterState",
        solver_reason: Optional[TerminationReason],
        cancelled: bool,
    ) -> Optional[TerminationReason]:
        budget = self.budget
        if criterion == "solver":
            return solver_reason
        if criterion == "max_iters":
            if budget.max_iters is not None and state.iter >= budget.max_iters:
                return TerminationReason.MAX_ITERS_REACHED
        elif criterion == "max_time":
            if (
                budget.max_time is not None
                and state.time is not None
                and state.time >= budget.max_time
            ):
                return TerminationReason.TIMED_OUT
        elif criterion == "target_cost":
            if _at_or_below(state.cost, budget.target_cost) or _at_or_below(
                state.best_cost, budget.target_cost
            ):
                return TerminationReason.TARGET_COST_REACHED
        elif criterion == "no_change":
            if (
                budget.patience is not None
                and state.no_improvement_iters >= budget.patience
            ):
                return TerminationReason.NO_CHANGE_IN_COST
        elif criterion == "condition":
            if budget.condition is not None and budget.condition(state):
                return TerminationReason.CONDITION_MET
        elif criterion == "cancelled":
            if cancelled:
                return TerminationReason.ABORTED
        return None


def _at_or_below(cost: Optional[float], target: float) -> bool:
    if cost is None or math.isnan(cost) or math.isinf(cost):
        return False
    return cost <= target


__all__ = ["CRITERIA", "Budget", "TerminationPolicy", "TerminationReason"]

"""Per-run iteration state."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .kv import KV
from .problem import COUNT_KEYS, Problem
from .termination import TerminationReason


def _as_cost(value: Any) -> float:
    if value is None:
        return math.inf
    return float(value)


@dataclass
class IterState:
    """
    Mutable record of an optimization run.

    Solvers update the parameter, cost and derivative fields through the
    ``set_*`` methods, which keep the previous value in the matching
    ``prev_*`` field. The executor owns the bookkeeping fields (iteration,
    counts, time, termination). Algorithm-specific data goes into
    ``extension``; the executor never looks at it.

    Invariant: ``best_cost`` is at most every cost recorded through
    :meth:`update`, and ``best_param`` is the parameter it was recorded at.
    """

    param: Any = None
    prev_param: Any = None
    best_param: Any = None
    prev_best_param: Any = None
    cost: float = math.inf
    prev_cost: float = math.inf
    best_cost: float = math.inf
    prev_best_cost: float = math.inf
    grad: Any = None
    prev_grad: Any = None
    hessian: Any = None
    prev_hessian: Any = None
    inv_hessian: Any = None
    prev_inv_hessian: Any = None
    jacobian: Any = None
    prev_jacobian: Any = None
    iter: int = 0
    last_best_iter: int = 0
    no_improvement_iters: int = 0
    counts: Dict[str, int] = field(default_factory=lambda: {k: 0 for k in COUNT_KEYS})
    time: Optional[float] = None
    termination_reason: Optional[TerminationReason] = None
    extension: Any = None

    def __post_init__(self) -> None:
        self.cost = _as_cost(self.cost)
        self.best_cost = _as_cost(self.best_cost)

    # -- solver-facing setters -------------------------------------------

    def set_param(self, param: Any) -> "IterState":
        self.prev_param = self.param
        self.param = param
        return self

    def set_cost(self, cost: Any) -> "IterState":
        self.prev_cost = self.cost
        self.cost = _as_cost(cost)
        return self

    def set_gradient(self, grad: Any) -> "IterState":
        self.prev_grad = self.grad
        self.grad = grad
        return self

    def set_hessian(self, hessian: Any) -> "IterState":
        self.prev_hessian = self.hessian
        self.hessian = hessian
        return self

    def set_inv_hessian(self, inv_hessian: Any) -> "IterState":
        self.prev_inv_hessian = self.inv_hessian
        self.inv_hessian = inv_hessian
        return self

    def set_jacobian(self, jacobian: Any) -> "IterState":
        self.prev_jacobian = self.jacobian
        self.jacobian = jacobian
        return self

    def with_extension(self, extension: Any) -> "IterState":
        self.extension = extension
        return self

    # -- executor bookkeeping --------------------------------------------

    def update(self, min_delta: float = 0.0) -> bool:
        """Track the best parameter; return True if a new best was recorded.

        A finite cost equal to the best cost is not an improvement. While the
        solver leaves the cost unevaluated (cost and best cost are the same
        infinity), the best point follows ``param`` and the run never counts
        as stagnating. ``best_param`` is never None once ``param`` is set.
        """
        first = self.best_param is None and self.param is not None
        unscored = (
            self.param is not None
            and math.isinf(self.cost)
            and self.cost == self.best_cost
        )
        if self.cost < self.best_cost or first or unscored:
            decrease = self.best_cost - self.cost
            self.prev_best_param = self.best_param
            self.prev_best_cost = self.best_cost
            self.best_param = copy.deepcopy(self.param)
            self.best_cost = self.cost
            self.last_best_iter = self.iter
            if first or unscored or decrease > min_delta:
                self.no_improvement_iters = 0
            else:
                self.no_improvement_iters += 1
            return True
        self.no_improvement_iters += 1
        return False

    def is_best(self) -> bool:
        """True if the best cost improved in the latest iteration."""
        return self.last_best_iter == self.iter

    def increment_iter(self) -> None:
        self.iter += 1

    def record_counts(self, problem: Problem) -> None:
        self.counts = problem.counts

    def terminate_with(self, reason: TerminationReason) -> None:
        if self.termination_reason is not None:
            raise ValueError(
                f"Termination reason already set to {self.termination_reason.name}"
            )
        self.termination_reason = reason

    def is_terminated(self) -> bool:
        return self.termination_reason is not None

    def to_kv(self) -> KV:
        """Snapshot of the reportable fields in a stable order."""
        kv = KV.from_pairs(
            ("iter", self.iter),
            ("cost", self.cost),
            ("best_cost", self.best_cost),
            ("prev_best_cost", self.prev_best_cost),
        )
        for key in COUNT_KEYS:
            kv.set(key, self.counts.get(key, 0))
        kv.set("no_improvement_iters", self.no_improvement_iters)
        if self.time is not None:
            kv.set("time", self.time)
        return kv

    def snapshot(self) -> "IterState":
        """Deep copy, safe to keep after the run continues."""
        return copy.deepcopy(self)


__all__ = ["IterState"]

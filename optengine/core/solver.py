"""Abstract solver interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from .kv import KV
from .problem import Problem
from .state import IterState
from .termination import TerminationReason

SolverOutput = Tuple[IterState, Optional[KV]]


class Solver(ABC):
    """
    One optimization algorithm's iteration logic.

    A solver holds only configuration fixed at construction. Everything that
    changes during a run lives in the state (generic fields or
    ``state.extension``), which is what makes a checkpointed
    ``(solver, state)`` pair resume exactly. All objective evaluations must
    go through ``problem`` so they are counted.
    """

    name: str = "Solver"

    def init(self, problem: Problem, state: IterState) -> SolverOutput:
        """Prepare the starting state. Returns the state and optional KV."""
        return state, None

    @abstractmethod
    def next_iter(self, problem: Problem, state: IterState) -> SolverOutput:
        """Compute exactly one iteration from ``state``."""

    def terminate_internally(self, state: IterState) -> Optional[TerminationReason]:
        """Algorithm-specific stopping rule, checked before the budget."""
        return None

    def to_kv(self) -> KV:
        """Configuration reported to observers at init."""
        return KV()


__all__ = ["Solver", "SolverOutput"]

"""Result returned by the executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .errors import OptEngineError
from .problem import Problem
from .solver import Solver
from .state import IterState
from .termination import TerminationReason


@dataclass
class OptimizationResult:
    """
    Final problem, solver and state of a run.

    Attributes:
        problem: The problem, with its final evaluation counters.
        solver: The solver that produced the state.
        state: The final state; its best fields hold the best point of the
            whole run, which is not necessarily the last iterate.
        diagnostics: Non-fatal observer and checkpoint errors in the order
            they occurred.
    """

    problem: Problem
    solver: Solver
    state: IterState
    diagnostics: List[OptEngineError] = field(default_factory=list)

    @property
    def reason(self) -> Optional[TerminationReason]:
        return self.state.termination_reason

    @property
    def best_param(self) -> Any:
        return self.state.best_param

    @property
    def best_cost(self) -> float:
        return self.state.best_cost

    def __str__(self) -> str:
        state = self.state
        lines = [
            "OptimizationResult:",
            f"    solver:        {self.solver.name}",
            f"    best param:    {state.best_param}",
            f"    best cost:     {state.best_cost}",
            f"    iterations:    {state.iter}",
            f"    termination:   {self.reason}",
        ]
        if state.time is not None:
            lines.append(f"    time:          {state.time:.6f}s")
        for key, value in state.counts.items():
            lines.append(f"    {key + ':':<15}{value}")
        return "\n".join(lines)


__all__ = ["OptimizationResult"]

"""The executor drives a solver until the termination policy stops it.

Example
-------
>>> import numpy as np
>>> from optengine import BFGS, Budget, Executor, FunctionObjective, IterState
>>> from optengine.solvers import HagerZhangLineSearch
>>> objective = FunctionObjective(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)
>>> executor = Executor(
...     objective,
...     BFGS(HagerZhangLineSearch()),
...     IterState(param=np.array([1.0, -2.0]), inv_hessian=np.eye(2)),
...     budget=Budget(max_iters=50),
... )
>>> result = executor.run()
>>> result.best_cost < 1e-10
True
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from ..logging import get_logger
from .cancellation import CancellationToken, interrupt_cancels
from .checkpointing import Checkpoint
from .errors import CheckpointError, ObserverError, OptEngineError, SolverError
from .observers import Observer, ObserverMode, Observers
from .problem import Problem
from .result import OptimizationResult
from .solver import Solver, SolverOutput
from .state import IterState
from .termination import Budget, TerminationPolicy

logger = get_logger(__name__)


class ExecutorPhase(Enum):
    CREATED = "created"
    INITIALIZED = "initialized"
    RUNNING = "running"
    TERMINATED = "terminated"


class Executor:
    """
    Runs a solver on a problem.

    Args:
        objective: The objective, or a :class:`Problem` whose counters should
            be shared (used by solvers that run an inner executor).
        solver: The algorithm.
        state: Initial state, typically carrying the initial parameter.
        budget: Termination limits. Defaults to an unlimited budget, so the
            run only stops through the solver or cancellation.
        checkpoint: Optional checkpoint, saved at its configured frequency.
        resume: Load ``checkpoint`` before starting. A missing checkpoint
            starts fresh; an unreadable one raises :class:`CheckpointError`.
            A resumed state is checked against this executor's budget, even
            if it was saved at termination.
        timer: Measure elapsed time into ``state.time``. Forced on when the
            budget has a ``max_time``.
        cancellation: Token polled once per iteration boundary.
        handle_interrupt: Cancel the run on SIGINT (main thread only).
        fail_on_observer_error: Raise the first observer error of a round
            after all observers of that round were notified.
        log_level: Level of the run start/end messages.
    """

    def __init__(
        self,
        objective: Any,
        solver: Solver,
        state: Optional[IterState] = None,
        *,
        budget: Optional[Budget] = None,
        checkpoint: Optional[Checkpoint] = None,
        resume: bool = False,
        timer: bool = True,
        cancellation: Optional[CancellationToken] = None,
        handle_interrupt: bool = False,
        fail_on_observer_error: bool = False,
        log_level: int = logging.INFO,
    ) -> None:
        if not isinstance(solver, Solver):
            raise TypeError(f"solver must be a Solver, got {type(solver).__name__}")
        if resume and checkpoint is None:
            raise ValueError("resume=True requires a checkpoint")
        self.problem = objective if isinstance(objective, Problem) else Problem(objective)
        self.solver = solver
        self.state = state if state is not None else IterState()
        self.policy = TerminationPolicy(budget)
        self.checkpoint = checkpoint
        self.resume = resume
        self.timer = timer or self.policy.budget.max_time is not None
        self.cancellation = cancellation if cancellation is not None else CancellationToken()
        self.handle_interrupt = handle_interrupt
        self.fail_on_observer_error = fail_on_observer_error
        self.log_level = log_level
        self.observers = Observers()
        self.phase = ExecutorPhase.CREATED
        self._diagnostics: List[OptEngineError] = []
        self._time_offset = 0.0
        self._start = 0.0

    @property
    def budget(self) -> Budget:
        return self.policy.budget

    def add_observer(
        self, observer: Observer, mode: ObserverMode = ObserverMode.ALWAYS
    ) -> "Executor":
        self.observers.add(observer, mode)
        return self

    def run(self) -> OptimizationResult:
        """Run to termination and return the result.

        Raises:
            ObjectiveError: An objective evaluation failed.
            SolverError: The solver failed.
            CheckpointError: Resuming from the checkpoint failed.
            RuntimeError: ``run`` was already called.
        """
        if self.phase is not ExecutorPhase.CREATED:
            raise RuntimeError("Executor.run() can only be called once")
        try:
            if self.handle_interrupt:
                with interrupt_cancels(self.cancellation):
                    return self._run()
            return self._run()
        finally:
            self.phase = ExecutorPhase.TERMINATED

    def _run(self) -> OptimizationResult:
        self._start = time.perf_counter()
        state = self._initialize()
        self.phase = ExecutorPhase.INITIALIZED

        if not state.is_terminated():
            reason = self.policy.evaluate(
                state,
                self.solver.terminate_internally(state),
                self.cancellation.cancelled,
            )
            if reason is not None:
                state.terminate_with(reason)
                self._maybe_checkpoint(state)

        self.phase = ExecutorPhase.RUNNING
        while not state.is_terminated():
            state = self._iterate(state)

        self.state = state
        logger.log(
            self.log_level,
            "%s terminated after %d iterations: %s (best cost %s)",
            self.solver.name,
            state.iter,
            state.termination_reason,
            state.best_cost,
        )
        return OptimizationResult(
            problem=self.problem,
            solver=self.solver,
            state=state,
            diagnostics=list(self._diagnostics),
        )

    def _initialize(self) -> IterState:
        loaded = self._load_checkpoint() if self.resume else None
        if loaded is not None:
            self.solver, state = loaded
            # the current budget decides whether a saved final state continues
            state.termination_reason = None
            try:
                self.problem.restore_counts(state.counts)
            except ValueError as exc:
                raise CheckpointError(
                    f"Cannot resume from checkpoint: {exc}", iteration=state.iter
                ) from exc
            self._time_offset = state.time or 0.0
            logger.log(
                self.log_level, "Resuming %s at iteration %d", self.solver.name, state.iter
            )
            return state

        logger.log(self.log_level, "Starting %s", self.solver.name)
        state, kv = self._call_solver(self.solver.init, self.state, iteration=0)
        state.update(self.budget.min_delta)
        state.record_counts(self.problem)
        self._tick(state)
        init_kv = self.solver.to_kv().merge(kv)
        self._report(self.observers.notify_init(self.solver.name, init_kv))
        return state

    def _load_checkpoint(self) -> Optional[Tuple[Solver, IterState]]:
        try:
            return self.checkpoint.load()
        except CheckpointError:
            raise
        except Exception as exc:
            raise CheckpointError(f"Failed to load checkpoint: {exc}") from exc

    def _iterate(self, state: IterState) -> IterState:
        state, kv = self._call_solver(
            self.solver.next_iter, state, iteration=state.iter + 1
        )
        state.increment_iter()
        state.update(self.budget.min_delta)
        state.record_counts(self.problem)
        self._tick(state)

        solver_reason = self.solver.terminate_internally(state)
        reason = self.policy.evaluate(state, solver_reason, self.cancellation.cancelled)
        if reason is not None:
            state.terminate_with(reason)

        logger.debug(
            "iter %d: cost=%s best_cost=%s", state.iter, state.cost, state.best_cost
        )
        self._report(self.observers.notify_iter(state, state.to_kv().merge(kv)))
        self._maybe_checkpoint(state)
        return state

    def _call_solver(
        self,
        method: Callable[[Problem, IterState], SolverOutput],
        state: IterState,
        iteration: int,
    ) -> SolverOutput:
        try:
            output = method(self.problem, state)
        except OptEngineError as exc:
            exc.iteration = iteration
            logger.error("%s failed: %s", self.solver.name, exc)
            raise
        except Exception as exc:
            error = SolverError(
                f"{self.solver.name} raised {type(exc).__name__}: {exc}",
                iteration=iteration,
            )
            logger.error("%s", error)
            raise error from exc
        if (
            not isinstance(output, tuple)
            or len(output) != 2
            or not isinstance(output[0], IterState)
        ):
            raise SolverError(
                f"{self.solver.name}.{method.__name__} must return (IterState, KV | None)",
                iteration=iteration,
            )
        return output

    def _tick(self, state: IterState) -> None:
        if self.timer:
            state.time = self._time_offset + (time.perf_counter() - self._start)

    def _report(self, errors: List[ObserverError]) -> None:
        self._diagnostics.extend(errors)
        if errors and self.fail_on_observer_error:
            raise errors[0]

    def _maybe_checkpoint(self, state: IterState) -> None:
        if self.checkpoint is None or not self.checkpoint.frequency.should_save(state):
            return
        try:
            self.checkpoint.save(self.solver, state)
        except CheckpointError as exc:
            logger.warning("%s", exc)
            self._diagnostics.append(exc)
        except Exception as exc:
            error = CheckpointError(
                f"Failed to save checkpoint: {exc}", iteration=state.iter
            )
            error.__cause__ = exc
            logger.warning("%s", error)
            self._diagnostics.append(error)


__all__ = ["Executor", "ExecutorPhase"]

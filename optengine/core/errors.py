"""Exception taxonomy for optimization runs.

Objective and solver errors are fatal to the run that raised them and reach
the caller of :meth:`optengine.core.executor.Executor.run` unchanged, with the
iteration number attached. Checkpoint save errors and observer errors are
non-fatal diagnostics; checkpoint load errors are fatal at startup.
"""

from __future__ import annotations

from typing import Optional

EVALUATION_KINDS = ("cost", "gradient", "hessian", "jacobian")


class OptEngineError(Exception):
    """Base class for all optengine errors."""

    def __init__(self, message: str, *, iteration: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.iteration = iteration

    def __str__(self) -> str:
        if self.iteration is None:
            return self.message
        return f"{self.message} (iteration {self.iteration})"


class ObjectiveError(OptEngineError):
    """An objective evaluation failed.

    Attributes:
        kind: Evaluation kind that failed ("cost", "gradient", "hessian" or
            "jacobian").
    """

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[str] = None,
        iteration: Optional[int] = None,
    ) -> None:
        if kind is not None and kind not in EVALUATION_KINDS:
            raise ValueError(f"Unknown evaluation kind: {kind!r}")
        super().__init__(message, iteration=iteration)
        self.kind = kind

    def __str__(self) -> str:
        text = super().__str__()
        if self.kind is None:
            return text
        return f"{self.kind} evaluation failed: {text}"


class ObjectiveNotImplementedError(ObjectiveError, NotImplementedError):
    """The objective does not provide the requested capability.

    This signals a programming error in the solver (it asked for a derivative
    the objective cannot supply) and is never retried.
    """


class SolverError(OptEngineError):
    """Algorithm-internal failure that is not a normal termination."""


class InvalidParameterError(SolverError, ValueError):
    """Solver or line-search configuration is out of range."""


class NotInitializedError(SolverError):
    """A solver was asked to iterate on a state it did not initialize."""


class CheckpointError(OptEngineError):
    """Saving or loading a checkpoint failed."""


class ObserverError(OptEngineError):
    """An observer failed to process a notification.

    Attributes:
        observer: Name of the failing observer.
    """

    def __init__(
        self,
        message: str,
        *,
        observer: str = "",
        iteration: Optional[int] = None,
    ) -> None:
        super().__init__(message, iteration=iteration)
        self.observer = observer


__all__ = [
    "EVALUATION_KINDS",
    "CheckpointError",
    "InvalidParameterError",
    "NotInitializedError",
    "ObjectiveError",
    "ObjectiveNotImplementedError",
    "ObserverError",
    "OptEngineError",
    "SolverError",
]

"""Iteration-control core: problem, state, solver contract and executor."""

from .cancellation import CancellationToken, interrupt_cancels
from .checkpointing import Checkpoint, CheckpointingFrequency, FileCheckpoint
from .errors import (
    CheckpointError,
    InvalidParameterError,
    NotInitializedError,
    ObjectiveError,
    ObjectiveNotImplementedError,
    ObserverError,
    OptEngineError,
    SolverError,
)
from .executor import Executor, ExecutorPhase
from .kv import KV
from .observers import LoggingObserver, Observer, ObserverMode, Observers, RecordingObserver
from .problem import FunctionObjective, Problem
from .result import OptimizationResult
from .solver import Solver, SolverOutput
from .state import IterState
from .termination import CRITERIA, Budget, TerminationPolicy, TerminationReason

__all__ = [
    "Budget",
    "CRITERIA",
    "CancellationToken",
    "Checkpoint",
    "CheckpointError",
    "CheckpointingFrequency",
    "Executor",
    "ExecutorPhase",
    "FileCheckpoint",
    "FunctionObjective",
    "InvalidParameterError",
    "IterState",
    "KV",
    "LoggingObserver",
    "NotInitializedError",
    "ObjectiveError",
    "ObjectiveNotImplementedError",
    "Observer",
    "ObserverError",
    "ObserverMode",
    "Observers",
    "OptEngineError",
    "OptimizationResult",
    "Problem",
    "RecordingObserver",
    "Solver",
    "SolverError",
    "SolverOutput",
    "TerminationPolicy",
    "TerminationReason",
    "interrupt_cancels",
]

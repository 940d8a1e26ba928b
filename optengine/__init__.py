"""optengine - a generic iteration engine for numerical optimization.

The engine runs any :class:`Solver` against any objective, keeping exact
evaluation counts, applying a configurable termination policy, notifying
observers and checkpointing for resume.

Example
-------
>>> import numpy as np
>>> from optengine import Budget, Executor, FunctionObjective, IterState
>>> from optengine.solvers import Newton
>>> objective = FunctionObjective(
...     fun=lambda x: float(x @ x),
...     grad=lambda x: 2 * x,
...     hess=lambda x: 2 * np.eye(x.size),
... )
>>> result = Executor(
...     objective, Newton(), IterState(param=np.array([1.0, 2.0])), budget=Budget(max_iters=10)
... ).run()
>>> result.reason.name
'SOLVER_CONVERGED'
"""

__version__ = "0.1.0"

from .core import (
    KV,
    Budget,
    CancellationToken,
    Checkpoint,
    CheckpointError,
    CheckpointingFrequency,
    Executor,
    ExecutorPhase,
    FileCheckpoint,
    FunctionObjective,
    InvalidParameterError,
    IterState,
    LoggingObserver,
    NotInitializedError,
    ObjectiveError,
    ObjectiveNotImplementedError,
    Observer,
    ObserverError,
    ObserverMode,
    OptEngineError,
    OptimizationResult,
    Problem,
    RecordingObserver,
    Solver,
    SolverError,
    TerminationPolicy,
    TerminationReason,
)
from .logging import configure_logging, get_logger, set_log_level
from .solvers import (
    BFGS,
    BacktrackingLineSearch,
    HagerZhangLineSearch,
    Newton,
    SteepestDescent,
)

__all__ = [
    "BFGS",
    "BacktrackingLineSearch",
    "Budget",
    "CancellationToken",
    "Checkpoint",
    "CheckpointError",
    "CheckpointingFrequency",
    "Executor",
    "ExecutorPhase",
    "FileCheckpoint",
    "FunctionObjective",
    "HagerZhangLineSearch",
    "InvalidParameterError",
    "IterState",
    "KV",
    "LoggingObserver",
    "Newton",
    "NotInitializedError",
    "ObjectiveError",
    "ObjectiveNotImplementedError",
    "Observer",
    "ObserverError",
    "ObserverMode",
    "OptEngineError",
    "OptimizationResult",
    "Problem",
    "RecordingObserver",
    "Solver",
    "SolverError",
    "SteepestDescent",
    "TerminationPolicy",
    "TerminationReason",
    "__version__",
    "configure_logging",
    "get_logger",
    "set_log_level",
]

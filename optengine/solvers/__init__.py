"""Reference solvers built on the engine contracts.

Example
-------
>>> import numpy as np
>>> from optengine import Budget, Executor, FunctionObjective, IterState
>>> from optengine.solvers import BacktrackingLineSearch, SteepestDescent
>>> objective = FunctionObjective(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)
>>> result = Executor(
...     objective,
...     SteepestDescent(BacktrackingLineSearch()),
...     IterState(param=np.array([3.0, -1.0])),
...     budget=Budget(max_iters=100),
... ).run()
>>> bool(result.best_cost < 1e-12)
True
"""

from .gradient_descent import DescentData, SteepestDescent
from .linesearch import (
    BacktrackingLineSearch,
    HagerZhangLineSearch,
    LineSearch,
    LineSearchInput,
    run_line_search,
)
from .newton import Newton, NewtonData
from .quasi_newton import BFGS

__all__ = [
    "BFGS",
    "BacktrackingLineSearch",
    "DescentData",
    "HagerZhangLineSearch",
    "LineSearch",
    "LineSearchInput",
    "Newton",
    "NewtonData",
    "SteepestDescent",
    "run_line_search",
]

"""BFGS quasi-Newton method."""

from __future__ import annotations

import math
import sys
from typing import Optional

from ..core.errors import InvalidParameterError
from ..core.kv import KV
from ..core.problem import Problem
from ..core.solver import Solver, SolverOutput
from ..core.state import IterState
from ..core.termination import TerminationReason
from ..math import get_backend
from .gradient_descent import DescentData
from .linesearch.base import LineSearch, line_search_failed, run_line_search

EPS = sys.float_info.epsilon


class BFGS(Solver):
    """
    BFGS with an inverse-Hessian approximation kept in ``state.inv_hessian``.

    When the curvature condition y^T s > 0 fails the approximation is reset to
    the identity. If the initial state has no ``inv_hessian`` the identity is
    used. Parameters must be 1-D vectors.

    Args:
        linesearch: Line-search solver run once per iteration.
        tol_grad: Converged when the gradient norm drops below this value.
        tol_cost: Stop when the cost changes by less than this value.
        max_linesearch_iters: Iteration budget of each line search.
    """

    name = "BFGS"

    def __init__(
        self,
        linesearch: LineSearch,
        tol_grad: float = math.sqrt(EPS),
        tol_cost: float = EPS,
        max_linesearch_iters: int = 20,
    ) -> None:
        if not isinstance(linesearch, LineSearch):
            raise InvalidParameterError("linesearch must be a LineSearch solver")
        if tol_grad < 0:
            raise InvalidParameterError("BFGS: tol_grad must be non-negative")
        if tol_cost < 0:
            raise InvalidParameterError("BFGS: tol_cost must be non-negative")
        if max_linesearch_iters < 1:
            raise InvalidParameterError("BFGS: max_linesearch_iters must be positive")
        self.linesearch = linesearch
        self.tol_grad = tol_grad
        self.tol_cost = tol_cost
        self.max_linesearch_iters = max_linesearch_iters

    def init(self, problem: Problem, state: IterState) -> SolverOutput:
        if state.param is None:
            raise InvalidParameterError("BFGS: initial parameter not set")
        backend = get_backend(state.param)
        if not math.isfinite(state.cost):
            state.set_cost(problem.cost(state.param))
        if state.grad is None:
            state.set_gradient(problem.gradient(state.param))
        if state.inv_hessian is None:
            state.set_inv_hessian(backend.eye_like(state.param))
        return state.with_extension(DescentData()), None

    def next_iter(self, problem: Problem, state: IterState) -> SolverOutput:
        backend = get_backend(state.param)
        param, grad, inv_hessian = state.param, state.grad, state.inv_hessian
        direction = backend.scale(backend.matvec(inv_hessian, grad), -1.0)
        result = run_line_search(
            problem,
            self.linesearch,
            param,
            direction,
            cost=state.cost,
            grad=grad,
            max_iters=self.max_linesearch_iters,
        )
        failed = line_search_failed(result, state.cost)
        new_param = result.state.param
        new_grad = problem.gradient(new_param)

        s = backend.sub(new_param, param)
        y = backend.sub(new_grad, grad)
        ys = backend.dot(y, s)
        if ys <= 1e-12:
            new_inv_hessian = backend.eye_like(param)
        else:
            rho = 1.0 / ys
            identity = backend.eye_like(param)
            left = backend.sub(identity, backend.scale(backend.outer(s, y), rho))
            right = backend.sub(identity, backend.scale(backend.outer(y, s), rho))
            new_inv_hessian = backend.add(
                backend.matmul(backend.matmul(left, inv_hessian), right),
                backend.scale(backend.outer(s, s), rho),
            )

        state.set_param(new_param).set_cost(result.state.cost)
        state.set_gradient(new_grad).set_inv_hessian(new_inv_hessian)
        state.with_extension(DescentData(result.reason, failed))
        kv = KV().set("gradient_norm", backend.norm(new_grad)).set("ys", ys)
        return state, kv

    def terminate_internally(self, state: IterState) -> Optional[TerminationReason]:
        data = state.extension
        if isinstance(data, DescentData) and data.linesearch_failed:
            return TerminationReason.LINE_SEARCH_FAILED
        if state.grad is not None and get_backend(state.grad).norm(state.grad) < self.tol_grad:
            return TerminationReason.SOLVER_CONVERGED
        if state.iter > 0 and abs(state.prev_cost - state.cost) < self.tol_cost:
            return TerminationReason.NO_CHANGE_IN_COST
        return None

    def to_kv(self) -> KV:
        return KV.from_pairs(
            ("linesearch", self.linesearch.name),
            ("tol_grad", self.tol_grad),
            ("tol_cost", self.tol_cost),
        )


__all__ = ["BFGS"]

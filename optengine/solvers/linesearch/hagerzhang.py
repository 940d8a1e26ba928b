"""Hager-Zhang line search.

Finds a step length satisfying the (approximate) strong Wolfe conditions by
maintaining a bracket [a, b] and shrinking it with double secant steps.

Reference: W. W. Hager and H. Zhang, "A new conjugate gradient method with
guaranteed descent and an efficient line search", SIAM J. Optim. 16(1), 2006,
170-192.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from typing import Any, NamedTuple, Optional, Tuple

from ...core.errors import InvalidParameterError
from ...core.kv import KV
from ...core.problem import Problem
from ...core.solver import SolverOutput
from ...core.state import IterState
from ...core.termination import TerminationReason
from ...math import get_backend
from .base import LineSearch

EPS = sys.float_info.epsilon
# Cap on the bisection loop of update rule U3.
_MAX_BISECTIONS = 100


class _Point(NamedTuple):
    """Step length with the cost and directional derivative there."""

    x: float
    f: float
    g: float


@dataclass(frozen=True)
class HagerZhangData:
    init_param: Any
    direction: Any
    finit: float
    dginit: float
    epsilon_k: float
    a: _Point
    b: _Point
    c: _Point
    best: _Point


class HagerZhangLineSearch(LineSearch):
    """
    Hager-Zhang line search.

    Args:
        delta: Sufficient decrease constant, in (0, 1).
        sigma: Curvature constant, in [delta, 1).
        epsilon: Relative tolerance of the approximate Wolfe conditions, >= 0.
        theta: Bisection weight used by update rule U3, in (0, 1).
        gamma: Bracket shrink factor below which a bisection is done, in (0, 1).
        eta: Lower-bound constant, > 0.
        alpha_min: Left end of the initial bracket, >= 0.
        alpha_max: Right end of the initial bracket, > alpha_min.
    """

    name = "Hager-Zhang line search"

    def __init__(
        self,
        delta: float = 0.1,
        sigma: float = 0.9,
        epsilon: float = 1e-6,
        theta: float = 0.5,
        gamma: float = 0.66,
        eta: float = 0.01,
        alpha_min: float = EPS,
        alpha_max: float = 100.0,
    ) -> None:
        if not (0.0 < delta < 1.0):
            raise InvalidParameterError("HagerZhangLineSearch: delta must be in (0, 1).")
        if not (delta <= sigma < 1.0):
            raise InvalidParameterError(
                "HagerZhangLineSearch: sigma must be >= delta and < 1."
            )
        if epsilon < 0.0:
            raise InvalidParameterError("HagerZhangLineSearch: epsilon must be >= 0.")
        if not (0.0 < theta < 1.0):
            raise InvalidParameterError("HagerZhangLineSearch: theta must be in (0, 1).")
        if not (0.0 < gamma < 1.0):
            raise InvalidParameterError("HagerZhangLineSearch: gamma must be in (0, 1).")
        if eta <= 0.0:
            raise InvalidParameterError("HagerZhangLineSearch: eta must be > 0.")
        if alpha_min < 0.0:
            raise InvalidParameterError("HagerZhangLineSearch: alpha_min must be >= 0.")
        if alpha_max <= alpha_min:
            raise InvalidParameterError(
                "HagerZhangLineSearch: alpha_min must be smaller than alpha_max."
            )
        self.delta = delta
        self.sigma = sigma
        self.epsilon = epsilon
        self.theta = theta
        self.gamma = gamma
        self.eta = eta
        self.alpha_min = alpha_min
        self.alpha_max = alpha_max

    def init(self, problem: Problem, state: IterState) -> SolverOutput:
        inputs = self._input(state)
        backend = get_backend(state.param)
        finit, _, dginit = self._initial_values(problem, state, backend, inputs.direction)
        data = HagerZhangData(
            init_param=state.param,
            direction=inputs.direction,
            finit=finit,
            dginit=dginit,
            epsilon_k=self.epsilon * abs(finit),
            a=_Point(0.0, 0.0, 0.0),
            b=_Point(0.0, 0.0, 0.0),
            c=_Point(0.0, 0.0, 0.0),
            best=_Point(0.0, finit, dginit),
        )
        a = self._point(problem, data, self.alpha_min)
        b = self._point(problem, data, self.alpha_max)
        c = self._point(problem, data, float(inputs.init_alpha))
        data = replace(data, a=a, b=b, c=c, best=_best(a, b, c))
        return self._emit(state, data), None

    def next_iter(self, problem: Problem, state: IterState) -> SolverOutput:
        data: HagerZhangData = state.extension
        # L1
        at, bt = self._secant2(problem, data, data.a, data.b)
        # L2
        if bt.x - at.x > self.gamma * (data.b.x - data.a.x):
            c = self._point(problem, data, (at.x + bt.x) / 2.0)
            at, bt = self._update(problem, data, at, bt, c)
        # L3
        data = replace(data, a=at, b=bt, best=_best(at, bt, data.c))
        kv = KV().set("alpha", data.best.x).set("bracket", (at.x, bt.x))
        return self._emit(state, data), kv

    def terminate_internally(self, state: IterState) -> Optional[TerminationReason]:
        data = state.extension
        if not isinstance(data, HagerZhangData):
            return None
        best = data.best
        # Wolfe conditions
        if (
            best.f - data.finit <= self.delta * best.x * data.dginit
            and best.g >= self.sigma * data.dginit
        ):
            return TerminationReason.LINE_SEARCH_CONDITION_MET
        # Approximate Wolfe conditions
        if (
            (2.0 * self.delta - 1.0) * data.dginit >= best.g >= self.sigma * data.dginit
            and best.f <= data.finit + data.epsilon_k
        ):
            return TerminationReason.LINE_SEARCH_CONDITION_MET
        return None

    def to_kv(self) -> KV:
        return KV.from_pairs(
            ("delta", self.delta),
            ("sigma", self.sigma),
            ("epsilon", self.epsilon),
            ("theta", self.theta),
            ("gamma", self.gamma),
            ("eta", self.eta),
            ("alpha_min", self.alpha_min),
            ("alpha_max", self.alpha_max),
        )

    def _emit(self, state: IterState, data: HagerZhangData) -> IterState:
        backend = get_backend(data.init_param)
        param = backend.scaled_add(data.init_param, data.best.x, data.direction)
        return state.set_param(param).set_cost(data.best.f).with_extension(data)

    def _point(self, problem: Problem, data: HagerZhangData, alpha: float) -> _Point:
        backend = get_backend(data.init_param)
        param = backend.scaled_add(data.init_param, alpha, data.direction)
        cost = float(problem.cost(param))
        slope = backend.dot(data.direction, problem.gradient(param))
        return _Point(alpha, cost, slope)

    def _update(
        self,
        problem: Problem,
        data: HagerZhangData,
        a: _Point,
        b: _Point,
        c: _Point,
    ) -> Tuple[_Point, _Point]:
        """Update rules U0-U3 of the bracketing interval."""
        bound = data.finit + data.epsilon_k
        # U0
        if c.x <= a.x or c.x >= b.x:
            return a, b
        # U1
        if c.g >= 0.0:
            return a, c
        # U2
        if c.f <= bound:
            return c, b
        # U3
        ah, bh = a, c
        for _ in range(_MAX_BISECTIONS):
            d = self._point(problem, data, (1.0 - self.theta) * ah.x + self.theta * bh.x)
            if d.g >= 0.0:
                return ah, d
            if d.f <= bound:
                ah = d
            else:
                bh = d
        return ah, bh

    def _secant2(
        self,
        problem: Problem,
        data: HagerZhangData,
        a: _Point,
        b: _Point,
    ) -> Tuple[_Point, _Point]:
        """Double secant step S1-S4."""
        # S1
        c = self._point(problem, data, _secant(a, b))
        aa, bb = self._update(problem, data, a, b, c)
        c_bar_x = None
        # S2
        if abs(c.x - bb.x) < EPS:
            c_bar_x = _secant(b, bb)
        # S3
        if abs(c.x - aa.x) < EPS:
            c_bar_x = _secant(a, aa)
        # S4
        if c_bar_x is not None:
            c_bar = self._point(problem, data, c_bar_x)
            return self._update(problem, data, aa, bb, c_bar)
        return aa, bb


def _secant(a: _Point, b: _Point) -> float:
    if b.g == a.g:
        return 0.5 * (a.x + b.x)
    return (a.x * b.g - b.x * a.g) / (b.g - a.g)


def _best(a: _Point, b: _Point, c: _Point) -> _Point:
    """Point with the lowest cost; ties go to the later of a, b, c."""
    best = a
    for point in (b, c):
        if point.f <= best.f:
            best = point
    return best


__all__ = ["HagerZhangData", "HagerZhangLineSearch"]

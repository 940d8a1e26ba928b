"""Line-search solvers."""

from .backtracking import BacktrackingData, BacktrackingLineSearch
from .base import LineSearch, LineSearchInput, line_search_failed, run_line_search
from .hagerzhang import HagerZhangData, HagerZhangLineSearch

__all__ = [
    "BacktrackingData",
    "BacktrackingLineSearch",
    "HagerZhangData",
    "HagerZhangLineSearch",
    "LineSearch",
    "LineSearchInput",
    "line_search_failed",
    "run_line_search",
]

"""Numeric backends: the arithmetic solvers are written against."""

from __future__ import annotations

import numbers
from typing import Any

import numpy as np
import torch

from .base import Backend, SingularMatrixError
from .numpy_backend import NumpyBackend
from .torch_backend import TorchBackend

NUMPY = NumpyBackend()
TORCH = TorchBackend()


def get_backend(value: Any) -> Backend:
    """Return the backend for a parameter, gradient or matrix value.

    Raises:
        TypeError: If no backend handles ``type(value)``.
    """
    if isinstance(value, torch.Tensor):
        return TORCH
    if isinstance(value, (np.ndarray, np.generic, numbers.Number)):
        return NUMPY
    raise TypeError(f"No numeric backend for values of type {type(value).__name__}")


__all__ = [
    "Backend",
    "NUMPY",
    "NumpyBackend",
    "SingularMatrixError",
    "TORCH",
    "TorchBackend",
    "get_backend",
]

"""Pytest configuration and shared fixtures for optengine tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Small objectives reused across the test suite
"""

import os

import numpy as np
import pytest
import torch

from optengine.core.test_utils import Quadratic


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests."""
    generator = torch.Generator()
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture
def quadratic() -> Quadratic:
    return Quadratic()


def rosenbrock(x):
    return float((1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2)


def rosenbrock_grad(x):
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def rosenbrock_hess(x):
    return np.array(
        [
            [2 - 400 * x[1] + 1200 * x[0] ** 2, -400 * x[0]],
            [-400 * x[0], 200.0],
        ]
    )


@pytest.fixture
def rosenbrock_fns():
    return rosenbrock, rosenbrock_grad, rosenbrock_hess

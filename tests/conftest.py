"""Pytest configuration and shared fixtures for qregister tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- A factory fixture for random normalized numpy states
"""

import os

import numpy as np
import pytest
import torch


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic torch RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    Device is determined by default_device().
    """
    from qregister.core.device import default_device

    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    device = default_device().as_torch_device()
    generator = torch.Generator(device=device)
    generator.manual_seed(seed)
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds(rng: np.random.Generator, torch_rng: torch.Generator) -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))
    torch.manual_seed(int(os.environ.get("TEST_RNG_SEED", "0")))
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(int(os.environ.get("TEST_RNG_SEED", "0")))


@pytest.fixture(scope="function", autouse=True)
def reset_debug_mode():
    """Run every test with debug mode off, restoring the previous value afterwards."""
    from qregister.diagnostics import is_debug_enabled, set_debug_enabled

    previous = is_debug_enabled()
    set_debug_enabled(False)
    yield
    set_debug_enabled(previous)


@pytest.fixture(scope="function")
def random_state(rng: np.random.Generator):
    """Factory for random normalized complex columns, shape (dim, ncols), as numpy."""

    def make(dim: int, ncols: int = 1) -> np.ndarray:
        psi = rng.normal(size=(dim, ncols)) + 1j * rng.normal(size=(dim, ncols))
        return psi / np.linalg.norm(psi, axis=0, keepdims=True)

    return make

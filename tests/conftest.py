"""Shared fixtures for the test suite."""
import numpy as np
import pytest


@pytest.fixture
def preset_p():
    """Three-state birth-death chain, stationary (2/11, 5/11, 4/11)."""
    return np.array([
        [0.95, 0.05, 0.00],
        [0.02, 0.94, 0.04],
        [0.00, 0.05, 0.95],
    ])


@pytest.fixture
def two_state_generator():
    """Generator with rates 0->1 = 0.3 and 1->0 = 0.1, stationary (1/4, 3/4)."""
    return np.array([
        [-0.3, 0.3],
        [0.1, -0.1],
    ])


@pytest.fixture
def fast_optimizer():
    """Cheap optimizer settings for tests that only exercise plumbing."""
    from connes import DistanceOptimizer
    return DistanceOptimizer(restarts=2, iterations=25)

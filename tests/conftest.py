"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def normal_pair(rng):
    """Two independent N(0, 1) samples of sizes 12 and 15."""
    return rng.normal(0.0, 1.0, 12), rng.normal(0.0, 1.0, 15)


@pytest.fixture
def separated_pair():
    """Two clearly separated groups."""
    return (
        np.array([1.0, 2.0, 3.0, 4.0, 5.0]),
        np.array([6.0, 7.0, 8.0, 9.0, 10.0]),
    )

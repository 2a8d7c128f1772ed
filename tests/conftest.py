"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from ecosim import ols as m_ols


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def linear_data():
    """The seed=1234, N=1000 draw of y = 1 + x1 + x2 + eps."""
    return m_ols.simulate_linear_data(n=1000, seed=1234)


@pytest.fixture
def collinear_data(rng):
    """Design with perfect collinearity (should fail)."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    X = np.column_stack([np.ones(n), x1, x2, x1 + x2])
    y = rng.standard_normal(n)
    return X, y

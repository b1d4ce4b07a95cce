"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np
import scipy.sparse as sp


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def dense_problem(rng):
    """Well-conditioned dense problem with a two-column outcome."""
    n, p, k = 60, 5, 2
    X = rng.standard_normal((n, p))
    Y = rng.standard_normal((n, k))
    return X, Y


@pytest.fixture
def sparse_problem(rng):
    """Sparse tall problem with full column rank (identity block on top)."""
    n, p, k = 80, 12, 3
    X = sp.random(n - p, p, density=0.2, format='csc', random_state=rng)
    X = sp.vstack([sp.identity(p, format='csc'), X]).tocsc()
    Y = rng.standard_normal((n, k))
    return X, Y


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity: third column is the sum of the first two."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    x3 = x1 + x2  # Perfect collinearity
    X = np.column_stack([x1, x2, x3])
    y = rng.standard_normal(n)
    return X, y

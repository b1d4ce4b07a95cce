"""
Tests for the dense pivoted QR kernel.
"""

import numpy as np
import pytest

from pyresiduals.core.exceptions import FactorizationError, SingularMatrixError
from pyresiduals.core.compute.linalg.qr import qr_cpu, qr_solve_cpu, solve_qr


class TestQRCpu:

    def test_reconstructs_permuted_matrix(self, rng):
        X = rng.standard_normal((20, 4))
        qr = qr_cpu(X)
        np.testing.assert_allclose(qr.Q @ qr.R, X[:, qr.pivot], atol=1e-12)
        assert qr.rank == 4

    def test_diagonal_non_increasing(self, rng):
        X = rng.standard_normal((30, 6))
        d = np.abs(np.diag(qr_cpu(X).R))
        assert np.all(np.diff(d) <= 1e-12)

    def test_rank_of_collinear(self, collinear_data):
        X, _ = collinear_data
        assert qr_cpu(X).rank == 2

    def test_explicit_tol_lowers_rank(self):
        X = np.diag([1.0, 1e-3])
        assert qr_cpu(X).rank == 2
        assert qr_cpu(X, tol=1e-2).rank == 1

    def test_zero_matrix_raises(self):
        with pytest.raises(FactorizationError, match="rank 0"):
            qr_cpu(np.zeros((5, 3)))

    def test_nan_raises(self):
        X = np.eye(3)
        X[1, 1] = np.nan
        with pytest.raises(FactorizationError):
            qr_cpu(X)

    def test_empty_raises(self):
        with pytest.raises(FactorizationError, match="empty"):
            qr_cpu(np.zeros((4, 0)))


class TestSolveQR:

    def test_matches_lstsq(self, rng):
        X = rng.standard_normal((25, 4))
        Y = rng.standard_normal((25, 3))
        beta, _ = qr_solve_cpu(X, Y, check_rank=False)
        expected = np.linalg.lstsq(X, Y, rcond=None)[0]
        np.testing.assert_allclose(beta, expected, atol=1e-10)

    def test_vector_outcome_shape(self, rng):
        X = rng.standard_normal((10, 3))
        beta, _ = qr_solve_cpu(X, rng.standard_normal(10), check_rank=False)
        assert beta.shape == (3,)

    def test_dead_column_gets_zero(self, collinear_data):
        X, y = collinear_data
        qr = qr_cpu(X)
        beta = solve_qr(qr, y, check_rank=False)
        assert beta[qr.pivot[2]] == 0.0

    def test_check_rank_raises(self, collinear_data):
        X, y = collinear_data
        with pytest.raises(SingularMatrixError) as exc_info:
            qr_solve_cpu(X, y, check_rank=True)
        assert exc_info.value.rank == 2
        assert exc_info.value.expected_rank == 3

"""
Tests for Design construction.
"""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest
import scipy.sparse as sp

from pyresiduals.residuals.design import Design
from pyresiduals.core.exceptions import DimensionError, ValidationError


class TestDesignDense:

    def test_properties(self, dense_problem):
        X, Y = dense_problem
        design = Design.dense(X, Y)
        assert design.n == 60
        assert design.p == 5
        assert design.k == 2
        assert not design.is_sparse
        assert not design.outcome_was_sparse
        assert design.nnz == 60 * 5

    def test_vector_outcome_k(self, dense_problem):
        X, Y = dense_problem
        assert Design.dense(X, Y[:, 0]).k == 1

    def test_int_inputs_converted(self):
        design = Design.dense([[1, 0], [0, 1]], [1, 2])
        assert design.X.dtype == np.float64
        assert design.Y.dtype == np.float64

    def test_frozen(self, dense_problem):
        X, Y = dense_problem
        design = Design.dense(X, Y)
        with pytest.raises(FrozenInstanceError):
            design._n = 3

    def test_empty_rejected(self):
        with pytest.raises(ValidationError, match="at least 1"):
            Design.dense(np.zeros((0, 2)), np.zeros(0))

    def test_outcome_without_columns_rejected(self):
        with pytest.raises(ValidationError, match="column"):
            Design.dense(np.eye(3), np.zeros((3, 0)))


class TestDesignSparse:

    def test_csc_conversion(self, sparse_problem):
        X, Y = sparse_problem
        design = Design.sparse(X.tocsr(), Y)
        assert design.is_sparse
        assert design.X.format == 'csc'
        assert design.nnz == X.nnz

    def test_sparse_outcome_densified(self, sparse_problem):
        X, Y = sparse_problem
        design = Design.sparse(X, sp.csr_matrix(Y))
        assert design.outcome_was_sparse
        assert isinstance(design.Y, np.ndarray)
        np.testing.assert_array_equal(design.Y, Y)

    def test_sparse_outcome_without_columns_rejected(self, sparse_problem):
        X, _ = sparse_problem
        with pytest.raises(ValidationError, match="column"):
            Design.sparse(X, sp.csc_matrix((X.shape[0], 0)))

    def test_row_mismatch(self, sparse_problem):
        X, Y = sparse_problem
        with pytest.raises(DimensionError, match="Inconsistent lengths"):
            Design.sparse(X, Y[:-1])


class TestDesignBuild:

    def test_dispatch(self, dense_problem, sparse_problem):
        assert not Design.build(*dense_problem).is_sparse
        assert Design.build(*sparse_problem).is_sparse

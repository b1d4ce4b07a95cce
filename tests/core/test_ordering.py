"""
Tests for sparse column orderings.
"""

import numpy as np
import pytest
import scipy.sparse as sp

from pyresiduals.core.compute.linalg.ordering import (
    ORDERINGS,
    column_intersection_graph,
    column_ordering,
    dense_threshold,
    minimum_degree,
)


def _is_permutation(order, p):
    return sorted(order.tolist()) == list(range(p))


class TestColumnIntersectionGraph:

    def test_pattern(self):
        X = sp.csc_matrix(np.array([
            [1.0, 2.0, 0.0],
            [0.0, 0.0, 3.0],
            [0.0, 5.0, 0.0],
        ]))
        G = column_intersection_graph(X).toarray()
        expected = np.array([
            [0.0, 1.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 0.0, 0.0],
        ])
        np.testing.assert_array_equal(G, expected)

    def test_symmetric_without_diagonal(self, sparse_problem):
        X, _ = sparse_problem
        G = column_intersection_graph(X)
        assert (G != G.T).nnz == 0
        assert np.all(G.diagonal() == 0)

    def test_dense_row_skipped(self):
        p = 400
        dense_row = sp.csc_matrix(np.ones((1, p)))
        X = sp.vstack([dense_row, sp.identity(p, format='csc')]).tocsc()
        assert p > dense_threshold(p)
        assert column_intersection_graph(X).nnz == 0


class TestMinimumDegree:

    def test_star_graph_center_last(self):
        # Node 0 is connected to everyone else; leaves go first
        p = 6
        rows = [0] * (p - 1) + list(range(1, p))
        cols = list(range(1, p)) + [0] * (p - 1)
        G = sp.csr_matrix((np.ones(len(rows)), (rows, cols)), shape=(p, p))
        order = minimum_degree(G)
        assert _is_permutation(order, p)
        assert order[0] != 0

    def test_empty_graph_is_identity(self):
        order = minimum_degree(sp.csr_matrix((4, 4)))
        np.testing.assert_array_equal(order, [0, 1, 2, 3])


class TestColumnOrdering:

    @pytest.mark.parametrize("method", ORDERINGS)
    def test_returns_permutation(self, sparse_problem, method):
        X, _ = sparse_problem
        assert _is_permutation(column_ordering(X, method), X.shape[1])

    def test_natural_is_identity(self, sparse_problem):
        X, _ = sparse_problem
        np.testing.assert_array_equal(column_ordering(X, 'natural'), np.arange(X.shape[1]))

    def test_single_column(self):
        X = sp.csc_matrix(np.ones((3, 1)))
        np.testing.assert_array_equal(column_ordering(X, 'rcm'), [0])

    def test_unknown_raises(self, sparse_problem):
        X, _ = sparse_problem
        with pytest.raises(ValueError, match="Unknown ordering"):
            column_ordering(X, 'colamd')

"""
Tests for input validation utilities.

Validates every function in core/validation.py:
    - check_array: conversion, dtype coercion, rejection of sparse/non-numeric
    - check_sparse: CSC conversion without densifying
    - check_ndim / check_2d / check_outcome_ndim: dimensionality checks
    - check_consistent_length: row-count matching
    - check_min_samples: minimum sample count
    - check_tolerance: rank tolerance sanity
"""

import numpy as np
import pytest
import scipy.sparse as sp

from pyresiduals.core.exceptions import DimensionError, ValidationError
from pyresiduals.core.validation import (
    check_2d,
    check_array,
    check_consistent_length,
    check_min_columns,
    check_min_samples,
    check_ndim,
    check_outcome_ndim,
    check_sparse,
    check_tolerance,
)


# ═══════════════════════════════════════════════════════════════════════
# check_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:
    """check_array converts to float64 ndarray and rejects non-numeric data."""

    def test_list_to_float_array(self):
        result = check_array([1, 2, 3], "X")
        assert isinstance(result, np.ndarray)
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [1.0, 2.0, 3.0])

    def test_int_array_promoted_to_float64(self):
        result = check_array(np.array([1, 2, 3], dtype=np.int32), "X")
        assert result.dtype == np.float64

    def test_float32_promoted_to_float64(self):
        result = check_array(np.array([1.0, 2.0], dtype=np.float32), "X")
        assert result.dtype == np.float64

    def test_nested_list_to_2d(self):
        result = check_array([[1, 2], [3, 4]], "X")
        assert result.shape == (2, 2)

    def test_object_dtype_rejected(self):
        with pytest.raises(ValidationError, match="X"):
            check_array(np.array([1, "a", None], dtype=object), "X")

    def test_string_dtype_rejected(self):
        with pytest.raises(ValidationError, match="non-numeric"):
            check_array(np.array(["a", "b"]), "Y")

    def test_complex_rejected(self):
        with pytest.raises(ValidationError, match="complex"):
            check_array(np.array([1 + 2j, 3 + 0j]), "X")

    def test_sparse_rejected(self):
        with pytest.raises(ValidationError, match="sparse"):
            check_array(sp.identity(3, format='csr'), "X")

    def test_nan_passes_through(self):
        result = check_array([1.0, np.nan], "X")
        assert np.isnan(result[1])


# ═══════════════════════════════════════════════════════════════════════
# check_sparse
# ═══════════════════════════════════════════════════════════════════════


class TestCheckSparse:

    def test_csr_converted_to_csc_float64(self):
        A = sp.csr_matrix(np.array([[1, 0], [0, 2]], dtype=np.int64))
        result = check_sparse(A, "X")
        assert result.format == 'csc'
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result.toarray(), [[1.0, 0.0], [0.0, 2.0]])

    def test_duplicates_summed(self):
        A = sp.coo_matrix(([1.0, 2.0], ([0, 0], [0, 0])), shape=(2, 2))
        result = check_sparse(A, "X")
        assert result.nnz == 1
        assert result[0, 0] == 3.0

    def test_dense_rejected(self):
        with pytest.raises(ValidationError, match="scipy.sparse"):
            check_sparse(np.eye(3), "X")

    def test_complex_rejected(self):
        A = sp.csc_matrix(np.array([[1 + 1j, 0], [0, 1]]))
        with pytest.raises(ValidationError, match="real numeric"):
            check_sparse(A, "X")


# ═══════════════════════════════════════════════════════════════════════
# Dimensionality
# ═══════════════════════════════════════════════════════════════════════


class TestDimensions:

    def test_check_ndim_passes(self):
        check_ndim(np.zeros((2, 3)), 2, "X")

    def test_check_ndim_fails(self):
        with pytest.raises(DimensionError, match="expected 2D"):
            check_ndim(np.zeros(3), 2, "X")

    def test_check_2d_rejects_3d(self):
        with pytest.raises(DimensionError, match="X"):
            check_2d(np.zeros((2, 2, 2)), "X")

    def test_check_2d_accepts_sparse(self):
        check_2d(sp.identity(3, format='csc'), "X")

    @pytest.mark.parametrize("shape", [(5,), (5, 2)])
    def test_outcome_vector_or_matrix(self, shape):
        check_outcome_ndim(np.zeros(shape), "Y")

    def test_outcome_3d_rejected(self):
        with pytest.raises(DimensionError, match="1D or 2D"):
            check_outcome_ndim(np.zeros((5, 2, 2)), "Y")

    def test_outcome_scalar_rejected(self):
        with pytest.raises(DimensionError):
            check_outcome_ndim(np.float64(1.0), "Y")


# ═══════════════════════════════════════════════════════════════════════
# check_consistent_length
# ═══════════════════════════════════════════════════════════════════════


class TestCheckConsistentLength:

    def test_matching_lengths(self):
        check_consistent_length(np.zeros((10, 3)), np.zeros(10), names=("X", "Y"))

    def test_mismatch_message(self):
        with pytest.raises(DimensionError, match="Inconsistent lengths: X=10, Y=8"):
            check_consistent_length(np.zeros((10, 3)), np.zeros((8, 1)), names=("X", "Y"))

    def test_sparse_and_dense(self):
        with pytest.raises(DimensionError):
            check_consistent_length(
                sp.identity(4, format='csc'), np.zeros(5), names=("X", "Y")
            )

    def test_names_count_mismatch(self):
        with pytest.raises(ValueError, match="must match"):
            check_consistent_length(np.zeros(3), np.zeros(3), names=("X",))


# ═══════════════════════════════════════════════════════════════════════
# check_min_samples / check_tolerance
# ═══════════════════════════════════════════════════════════════════════


class TestCheckMinSamples:

    def test_enough(self):
        check_min_samples(np.zeros((3, 2)), 1, "X")

    def test_too_few(self):
        with pytest.raises(ValidationError, match="at least 1"):
            check_min_samples(np.zeros((0, 2)), 1, "X")


class TestCheckMinColumns:

    def test_vector_counts_as_one(self):
        check_min_columns(np.zeros(3), 1, "Y")

    def test_matrix(self):
        check_min_columns(np.zeros((3, 2)), 1, "Y")

    def test_zero_columns(self):
        with pytest.raises(ValidationError, match="Y: requires at least 1 column"):
            check_min_columns(np.zeros((3, 0)), 1, "Y")


class TestCheckTolerance:

    @pytest.mark.parametrize("tol", [None, 0.0, 1e-12, 5.0])
    def test_valid(self, tol):
        check_tolerance(tol)

    @pytest.mark.parametrize("tol", [-1e-8, np.inf, np.nan])
    def test_invalid(self, tol):
        with pytest.raises(ValidationError, match="tol"):
            check_tolerance(tol)

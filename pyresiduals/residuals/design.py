"""
Residual Design.

Design holds a validated (X, Y) pair ready for a residual backend. All
checks shared by the dense and sparse solvers happen here, before any
factorization work starts: conversion to float64, dimensionality, and
equal row counts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
import scipy.sparse as sp
from numpy.typing import ArrayLike, NDArray

from pyresiduals.core.validation import (
    check_array,
    check_sparse,
    check_2d,
    check_outcome_ndim,
    check_consistent_length,
    check_min_samples,
    check_min_columns,
)


@dataclass(frozen=True)
class Design:
    """
    Validated least-squares problem (X, Y).

    Immutable after construction. X is either a float64 ndarray or a
    float64 CSC matrix; Y is always a dense float64 ndarray, (n,) or (n, k).
    A sparse Y is densified here and the fact is recorded so the
    residual can be handed back in sparse form.

    Construction:
        Design.dense(X, Y)    # dense X, dense Y
        Design.sparse(X, Y)   # sparse X, dense or sparse Y
        Design.build(X, Y)    # dispatch on the type of X
    """
    _X: NDArray[np.floating[Any]] | sp.csc_matrix
    _Y: NDArray[np.floating[Any]]
    _n: int
    _p: int
    _is_sparse: bool
    _outcome_was_sparse: bool = False

    @classmethod
    def dense(cls, X: ArrayLike, Y: ArrayLike) -> Design:
        """Build a dense Design. A sparse X or Y is rejected."""
        X_arr = check_array(X, 'X')
        Y_arr = check_array(Y, 'Y')
        return cls._build(X_arr, Y_arr, is_sparse=False, outcome_was_sparse=False)

    @classmethod
    def sparse(cls, X: Any, Y: Any) -> Design:
        """
        Build a sparse Design.

        X must be a scipy.sparse matrix; it is converted to CSC without
        densifying. Y may be dense or sparse; a sparse Y is densified
        into a working copy for the solve.
        """
        X_csc = check_sparse(X, 'X')
        if sp.issparse(Y):
            Y_arr = check_sparse(Y, 'Y').toarray()
            outcome_was_sparse = True
        else:
            Y_arr = check_array(Y, 'Y')
            outcome_was_sparse = False
        return cls._build(X_csc, Y_arr, is_sparse=True, outcome_was_sparse=outcome_was_sparse)

    @classmethod
    def build(cls, X: Any, Y: Any) -> Design:
        """Build a Design, choosing dense or sparse from the type of X."""
        if sp.issparse(X):
            return cls.sparse(X, Y)
        return cls.dense(X, Y)

    @classmethod
    def _build(
        cls,
        X: NDArray[np.floating[Any]] | sp.csc_matrix,
        Y: NDArray[np.floating[Any]],
        is_sparse: bool,
        outcome_was_sparse: bool,
    ) -> Design:
        """Internal builder with validation."""
        check_2d(X, 'X')
        check_outcome_ndim(Y, 'Y')
        check_min_samples(X, 1, 'X')
        check_min_columns(Y, 1, 'Y')
        check_consistent_length(X, Y, names=('X', 'Y'))

        n, p = X.shape
        return cls(
            _X=X,
            _Y=Y,
            _n=n,
            _p=p,
            _is_sparse=is_sparse,
            _outcome_was_sparse=outcome_was_sparse,
        )

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]] | sp.csc_matrix:
        """Design matrix (n x p)."""
        return self._X

    @property
    def Y(self) -> NDArray[np.floating[Any]]:
        """Outcome, (n,) or (n x k), always dense."""
        return self._Y

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of columns of X."""
        return self._p

    @property
    def k(self) -> int:
        """Number of outcome columns (1 for a vector outcome)."""
        return 1 if self._Y.ndim == 1 else self._Y.shape[1]

    @property
    def is_sparse(self) -> bool:
        """True when X is held in sparse (CSC) form."""
        return self._is_sparse

    @property
    def outcome_was_sparse(self) -> bool:
        """True when Y arrived sparse and was densified for the solve."""
        return self._outcome_was_sparse

    @property
    def nnz(self) -> int:
        """Stored nonzeros of X (n * p for dense X)."""
        if self._is_sparse:
            return int(self._X.nnz)
        return self._n * self._p

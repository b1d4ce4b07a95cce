"""
Least-squares residuals via QR factorization.

Public API:
    fit_residuals(X, Y, ...) -> ResidualSolution
    dense_residuals(X, Y, ...) -> ndarray
    sparse_residuals(X, Y, ...) -> ndarray | csc_matrix

fit_residuals() is the general entry point. It handles:
    - Input validation
    - Design construction
    - Backend selection
    - Result wrapping

dense_residuals() and sparse_residuals() return only the residual matrix
R = Y - X β̂ for dense and sparse X respectively.

Example:
    >>> from pyresiduals.residuals import fit_residuals
    >>> result = fit_residuals(X, Y)
    >>> print(result.residuals)
    >>> print(result.summary())
"""

from pyresiduals.residuals.design import Design
from pyresiduals.residuals.solution import ResidualSolution, ResidualParams
from pyresiduals.residuals.solvers import (
    BackendChoice,
    fit_residuals,
    dense_residuals,
    sparse_residuals,
)

__all__ = [
    "fit_residuals",
    "dense_residuals",
    "sparse_residuals",
    "Design",
    "ResidualSolution",
    "ResidualParams",
    "BackendChoice",
]

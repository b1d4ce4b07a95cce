"""
PyResiduals: least-squares residuals via QR factorization.

Computes R = Y - X β̂ for dense and sparse design matrices without ever
forming X'X, with comparison baselines and a small benchmark harness.

Submodules:
    residuals: Dense and sparse QR residual solvers
    benchmark: Synthetic problems and a timing runner
"""

__version__ = "0.1.0"

from pyresiduals import residuals
from pyresiduals import benchmark
from pyresiduals.residuals import fit_residuals, dense_residuals, sparse_residuals

__all__ = [
    "__version__",
    "residuals",
    "benchmark",
    "fit_residuals",
    "dense_residuals",
    "sparse_residuals",
]

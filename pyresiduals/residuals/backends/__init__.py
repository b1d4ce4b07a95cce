"""
Residual backends.

Available backends:
    DenseQRBackend: dense column-pivoted Householder QR (reference)
    SparseQRBackend: sparse Householder QR with configurable column ordering
    SPQRBackend: SuiteSparseQR via sparseqr (optional dependency)
    NormalEquationsBackend: Cholesky of X'X (comparison baseline)
    LstsqBackend: SVD minimum-norm solve (comparison baseline)
"""

from pyresiduals.residuals.backends.dense import DenseQRBackend
from pyresiduals.residuals.backends.sparse import SparseQRBackend
from pyresiduals.residuals.backends.baselines import NormalEquationsBackend, LstsqBackend

__all__ = [
    "DenseQRBackend",
    "SparseQRBackend",
    "NormalEquationsBackend",
    "LstsqBackend",
]

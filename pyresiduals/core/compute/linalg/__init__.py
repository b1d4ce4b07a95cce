"""
Linear algebra kernels for pyresiduals.

All functions follow these conventions:
    - Dense kernels use SciPy (LAPACK under the hood)
    - Sparse kernels work on scipy.sparse CSC matrices and never densify X
    - Each factorization returns a structured result dataclass
    - Errors are raised immediately with clear messages

Submodules:
    qr: Dense column-pivoted Householder QR
    sparse_qr: Sparse left-looking Householder QR with rank detection
    ordering: Fill-reducing column orderings for sparse QR
"""

from pyresiduals.core.compute.linalg.qr import (
    QRResult,
    qr_cpu,
    qr_solve_cpu,
    solve_qr,
)
from pyresiduals.core.compute.linalg.sparse_qr import (
    Reflector,
    SparseQRResult,
    sparse_qr,
    sparse_qr_solve,
    solve_sparse_qr,
    apply_qt,
)
from pyresiduals.core.compute.linalg.ordering import (
    ORDERINGS,
    OrderingChoice,
    column_ordering,
    column_intersection_graph,
    minimum_degree,
)

__all__ = [
    # Dense QR
    "QRResult",
    "qr_cpu",
    "qr_solve_cpu",
    "solve_qr",
    # Sparse QR
    "Reflector",
    "SparseQRResult",
    "sparse_qr",
    "sparse_qr_solve",
    "solve_sparse_qr",
    "apply_qt",
    # Orderings
    "ORDERINGS",
    "OrderingChoice",
    "column_ordering",
    "column_intersection_graph",
    "minimum_degree",
]

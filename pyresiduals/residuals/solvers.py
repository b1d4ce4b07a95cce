"""
Solver dispatch for least-squares residuals.

This module provides the public API (fit_residuals, dense_residuals,
sparse_residuals) and backend selection.
"""

from typing import Literal, Any
import numpy as np
import scipy.sparse as sp
from numpy.typing import ArrayLike, NDArray

from pyresiduals.core.compute.linalg.ordering import OrderingChoice
from pyresiduals.residuals.design import Design
from pyresiduals.residuals.solution import ResidualSolution
from pyresiduals.residuals.backends.dense import DenseQRBackend
from pyresiduals.residuals.backends.sparse import SparseQRBackend
from pyresiduals.residuals.backends.baselines import NormalEquationsBackend, LstsqBackend


# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu_qr', 'cpu_sparse_qr', 'spqr', 'cpu_normal', 'cpu_lstsq']

BACKENDS: tuple[str, ...] = ('auto', 'cpu_qr', 'cpu_sparse_qr', 'spqr', 'cpu_normal', 'cpu_lstsq')


def fit_residuals(
    X: Any,
    Y: Any,
    *,
    backend: BackendChoice = 'auto',
    check_rank: bool = False,
    tol: float | None = None,
    ordering: OrderingChoice | None = None,
) -> ResidualSolution:
    """
    Compute least-squares residuals R = Y - X β̂.

    β̂ minimizes ||Y - Xβ||² for every column of Y and is obtained from a
    QR factorization of X (the baseline backends excepted).

    This is the primary public API. All input validation, backend
    selection, and result wrapping happens here.

    Args:
        X: Design matrix (n x p). A dense array-like or a scipy.sparse matrix.
        Y: Outcome (n,) or (n x k). Dense, or sparse when X is sparse.
        backend: Computational backend to use:
            - 'auto': 'cpu_sparse_qr' for sparse X, 'cpu_qr' otherwise
            - 'cpu_qr': dense column-pivoted Householder QR
            - 'cpu_sparse_qr': sparse Householder QR with column ordering
            - 'spqr': SuiteSparseQR (requires the optional sparseqr package)
            - 'cpu_normal': normal equations via Cholesky (baseline)
            - 'cpu_lstsq': SVD minimum-norm solve (baseline)
        check_rank: Raise SingularMatrixError on rank-deficient X instead of
            solving on its numerically independent columns (QR backends)
        tol: Rank threshold; None selects the backend default (QR backends)
        ordering: Column ordering for 'cpu_sparse_qr' ('natural', 'rcm',
            'min_degree'); None selects 'min_degree'

    Returns:
        ResidualSolution with residuals, coefficients, rank and diagnostics

    Raises:
        ValidationError: If inputs are invalid
        DimensionError: If X and Y have different numbers of rows
        FactorizationError: If X has no usable triangular factor
        SingularMatrixError: If X is rank-deficient and check_rank=True
        ValueError: If backend or ordering is unknown, or the options do
            not apply to the chosen backend

    Example:
        >>> import numpy as np
        >>> from pyresiduals import fit_residuals
        >>>
        >>> X = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        >>> result = fit_residuals(X, [1.0, 2.0, 3.0])
        >>> np.allclose(result.coefficients, [1.0, 2.0])
        True
    """
    # === Construct Design ===
    # This is the boundary - validate here, trust everywhere else
    design = Design.build(X, Y)

    # === Select Backend ===
    backend_impl = _get_backend(
        backend, design, check_rank=check_rank, tol=tol, ordering=ordering
    )

    # === Solve ===
    result = backend_impl.solve(design)

    # === Wrap and Return ===
    return ResidualSolution(_result=result, _design=design)


def dense_residuals(
    X: ArrayLike,
    Y: ArrayLike,
    *,
    check_rank: bool = False,
    tol: float | None = None,
) -> NDArray[np.floating[Any]]:
    """
    Least-squares residuals for a dense X and dense Y.

    Args:
        X: Dense design matrix (n x p)
        Y: Dense outcome (n,) or (n x k)
        check_rank: Raise SingularMatrixError on rank-deficient X
        tol: Rank threshold on |R_ii|; None selects max(n, p) * eps * |R_00|

    Returns:
        Residual array with the shape of Y

    Raises:
        ValidationError: If X or Y is sparse or non-numeric
        DimensionError: If X and Y have different numbers of rows
        FactorizationError: If X has no usable triangular factor
        SingularMatrixError: If X is rank-deficient and check_rank=True
    """
    design = Design.dense(X, Y)
    result = DenseQRBackend(check_rank=check_rank, tol=tol).solve(design)
    return ResidualSolution(_result=result, _design=design).residuals


def sparse_residuals(
    X: Any,
    Y: Any,
    *,
    ordering: OrderingChoice = 'min_degree',
    check_rank: bool = False,
    tol: float | None = None,
) -> NDArray[np.floating[Any]] | sp.csc_matrix:
    """
    Least-squares residuals for a sparse X.

    X is factorized in sparse form and never densified. Y may be dense or
    sparse; a sparse Y is densified into a working copy before the solve
    (for any number of columns) and the residual is returned as a CSC
    matrix. A dense Y gives a dense residual.

    Args:
        X: scipy.sparse design matrix (n x p)
        Y: Outcome (n,) or (n x k), dense or sparse
        ordering: Column ordering ('natural', 'rcm', 'min_degree')
        check_rank: Raise SingularMatrixError on rank-deficient X
        tol: Rank threshold; None selects 20 * (n + p) * eps * max column norm

    Returns:
        Residuals with the shape and density class of Y

    Raises:
        ValidationError: If X is not sparse or inputs are non-numeric
        DimensionError: If X and Y have different numbers of rows
        FactorizationError: If X has no nonzeros or no usable triangular factor
        SingularMatrixError: If X is rank-deficient and check_rank=True
        ValueError: If ordering is unknown
    """
    backend = SparseQRBackend(ordering=ordering, check_rank=check_rank, tol=tol)
    design = Design.sparse(X, Y)
    result = backend.solve(design)
    return ResidualSolution(_result=result, _design=design).residuals


def _get_backend(
    choice: BackendChoice,
    design: Design,
    *,
    check_rank: bool,
    tol: float | None,
    ordering: OrderingChoice | None,
):
    """
    Select and instantiate the appropriate backend.

    Args:
        choice: User's backend preference
        design: The validated design (decides 'auto')
        check_rank: Strict rank policy for QR backends
        tol: Rank threshold for QR backends
        ordering: Column ordering, only meaningful for 'cpu_sparse_qr'

    Returns:
        Backend instance ready to solve

    Raises:
        ValueError: If unknown backend specified or options do not apply
        ImportError: If 'spqr' requested but sparseqr is not installed
    """
    if choice not in BACKENDS:
        raise ValueError(f"Unknown backend: {choice!r}")

    if choice == 'auto':
        choice = 'cpu_sparse_qr' if design.is_sparse else 'cpu_qr'

    if ordering is not None and choice != 'cpu_sparse_qr':
        raise ValueError(
            f"ordering applies only to the 'cpu_sparse_qr' backend, not {choice!r}"
        )

    if choice in ('cpu_normal', 'cpu_lstsq') and (check_rank or tol is not None):
        raise ValueError(
            f"check_rank and tol apply only to the QR backends, not {choice!r}"
        )

    if choice == 'cpu_qr':
        return DenseQRBackend(check_rank=check_rank, tol=tol)

    elif choice == 'cpu_sparse_qr':
        return SparseQRBackend(
            ordering=ordering if ordering is not None else 'min_degree',
            check_rank=check_rank,
            tol=tol,
        )

    elif choice == 'spqr':
        from pyresiduals.residuals.backends.spqr import SPQRBackend
        return SPQRBackend(check_rank=check_rank, tol=tol)

    elif choice == 'cpu_normal':
        return NormalEquationsBackend()

    else:
        return LstsqBackend()

"""
Dense QR decomposition and least-squares solve.

Householder QR with column pivoting (LAPACK geqp3 via SciPy). Pivoting
orders the diagonal of R by decreasing magnitude, which makes the
numerical rank readable straight off the diagonal and lets rank-deficient
X be solved on its independent columns instead of failing.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import linalg

from pyresiduals.core.exceptions import FactorizationError, SingularMatrixError
from pyresiduals.core.compute.tolerances import dense_rank_tolerance


@dataclass(frozen=True)
class QRResult:
    """
    Result of a column-pivoted QR decomposition X[:, pivot] = Q R.

    Attributes:
        Q: Orthonormal columns (n x m where m = min(n, p))
        R: Upper triangular factor (m x p)
        pivot: Column permutation (p,)
        rank: Numerical rank determined from the R diagonal
        tol: Threshold the diagonal was compared against
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    pivot: NDArray[np.intp]
    rank: int
    tol: float


def qr_cpu(
    X: NDArray[np.floating[Any]],
    tol: float | None = None,
) -> QRResult:
    """
    Economy QR decomposition with column pivoting.

    Computes X[:, pivot] = QR where Q has orthonormal columns and R is
    upper triangular with non-increasing |diag(R)|.

    Args:
        X: Matrix to decompose (n x p)
        tol: Rank threshold on |R_ii|. Defaults to max(n, p) * eps * |R_00|.

    Returns:
        QRResult with Q, R, pivot and numerical rank

    Raises:
        FactorizationError: If X is empty, contains non-finite values, or
            has numerical rank 0
    """
    n, p = X.shape
    if n == 0 or p == 0:
        raise FactorizationError(
            f"Cannot factorize an empty matrix of shape {X.shape}",
            matrix_name='X',
            shape=(n, p),
        )

    try:
        Q, R, pivot = linalg.qr(X, mode='economic', pivoting=True)
    except (ValueError, linalg.LinAlgError) as e:
        raise FactorizationError(
            f"QR factorization of X failed: {e}",
            matrix_name='X',
            shape=(n, p),
        ) from e

    # Determine numerical rank from R diagonal
    diag_R = np.abs(np.diag(R))
    if len(diag_R) > 0 and diag_R[0] > 0:
        threshold = tol if tol is not None else dense_rank_tolerance(n, p, float(diag_R[0]))
        rank = int(np.sum(diag_R > threshold))
    else:
        threshold = tol if tol is not None else 0.0
        rank = 0

    if rank == 0:
        raise FactorizationError(
            "Design matrix has no numerically independent columns (rank 0)",
            matrix_name='X',
            shape=(n, p),
        )

    return QRResult(Q=Q, R=R, pivot=pivot, rank=rank, tol=float(threshold))


def solve_qr(
    qr_result: QRResult,
    Y: NDArray[np.floating[Any]],
    check_rank: bool,
) -> NDArray[np.floating[Any]]:
    """
    Least-squares coefficients from an existing pivoted QR factorization.

    The solution is computed as:
        X P = QR
        β[P[:r]] = R[:r, :r]⁻¹ (Q'Y)[:r]
        β[P[r:]] = 0

    where r is the numerical rank. For full-rank X this is the unique
    least-squares solution. For rank-deficient X it is the basic
    solution, whose residual Y - Xβ equals the minimum-norm residual.

    Args:
        qr_result: Factorization of X from qr_cpu
        Y: Outcome (n,) or (n x k)
        check_rank: If True, raise SingularMatrixError on rank-deficient X

    Returns:
        β with shape (p,) or (p, k) following Y

    Raises:
        SingularMatrixError: If X is rank-deficient and check_rank=True
    """
    p = qr_result.R.shape[1]
    r = qr_result.rank

    if check_rank and r < p:
        raise SingularMatrixError(
            f"Design matrix is rank-deficient: rank={r}, expected={p}. "
            f"This indicates perfect multicollinearity.",
            matrix_name='X',
            rank=r,
            expected_rank=p
        )

    # Q'Y restricted to the leading r directions, then back substitution
    QtY = qr_result.Q[:, :r].T @ Y
    beta_live = linalg.solve_triangular(
        qr_result.R[:r, :r], QtY, lower=False, check_finite=False
    )

    beta = np.zeros((p,) + Y.shape[1:], dtype=np.float64)
    beta[qr_result.pivot[:r]] = beta_live

    return beta


def qr_solve_cpu(
    X: NDArray[np.floating[Any]],
    Y: NDArray[np.floating[Any]],
    check_rank: bool,
    tol: float | None = None,
) -> tuple[NDArray[np.floating[Any]], QRResult]:
    """
    Solve least squares via pivoted QR decomposition.

    Solves: min_β ||Y - Xβ||² column by column. See solve_qr.

    Args:
        X: Design matrix (n x p)
        Y: Outcome (n,) or (n x k)
        check_rank: If True, raise SingularMatrixError on rank-deficient X
        tol: Rank threshold, see qr_cpu

    Returns:
        Tuple (β, qr_result); β has shape (p,) or (p, k) following Y

    Raises:
        FactorizationError: If X has no numerically independent column
        SingularMatrixError: If X is rank-deficient and check_rank=True
    """
    qr_result = qr_cpu(X, tol=tol)
    return solve_qr(qr_result, Y, check_rank), qr_result

"""
Sparse Householder QR with rank detection.

Left-looking Householder QR over the columns of a CSC matrix:

    for each column k (in the chosen ordering):
        apply, in order, the earlier reflectors reachable from the rows
        of column k (found through a row -> reflector index)
        split the column into finished rows (entries of R above the
        diagonal) and active rows
        if ||active part|| <= tol: column k is dead, no reflector
        else: a new reflector maps the active part onto one pivot row

Reflectors and R are kept as sparse index/value arrays. The only
n-length buffers are one working column and its marker array, so memory
follows the nonzero count of X, R and the reflectors, not n * p.
Likewise the work per column follows the reflectors that can reach it,
not the number of reflectors formed so far.

Dead columns follow the rank-detection rule of SuiteSparseQR: the
column's tiny remainder is dropped and it never takes a pivot row. The
least-squares solve then fixes its coefficient at zero.
"""

import heapq
from dataclasses import dataclass
from typing import Any
import numpy as np
import scipy.sparse as sp
from numpy.typing import NDArray
from scipy.sparse.linalg import spsolve_triangular, norm as sparse_norm

from pyresiduals.core.exceptions import FactorizationError, SingularMatrixError
from pyresiduals.core.compute.tolerances import sparse_rank_tolerance
from pyresiduals.core.compute.linalg.ordering import OrderingChoice, column_ordering


@dataclass(frozen=True)
class Reflector:
    """
    Householder reflector H = I - beta v v' stored on its support.

    Attributes:
        rows: Row indices of the nonzeros of v
        values: Nonzero values of v
        beta: Scale, 2 / (v'v)
        pivot_row: Row that receives the reflected norm
    """
    rows: NDArray[np.intp]
    values: NDArray[np.floating[Any]]
    beta: float
    pivot_row: int

    def apply(self, work: NDArray[np.floating[Any]]) -> None:
        """Apply H in place to a working vector or row-block (n,) / (n, k)."""
        block = work[self.rows]
        w = self.values @ block
        work[self.rows] = block - self.beta * np.multiply.outer(self.values, w)


@dataclass(frozen=True)
class SparseQRResult:
    """
    Result of a sparse QR decomposition X[:, column_order] = Q [R; 0].

    Attributes:
        reflectors: Householder reflectors, in application order (Q = H_0 H_1 ...)
        R: Upper trapezoidal factor, rank x p, CSC, columns in column_order
        column_order: Column permutation applied to X before factorizing
        live: Positions (in permuted order) of the columns that took a pivot
        rank: Numerical rank
        tol: Threshold the active column norms were compared against
        shape: Shape of X
    """
    reflectors: tuple[Reflector, ...]
    R: sp.csc_matrix
    column_order: NDArray[np.intp]
    live: NDArray[np.intp]
    rank: int
    tol: float
    shape: tuple[int, int]

    @property
    def pivot_rows(self) -> NDArray[np.intp]:
        """Row of X that carries each row of R."""
        return np.asarray([h.pivot_row for h in self.reflectors], dtype=np.intp)

    @property
    def nnz_r(self) -> int:
        """Stored nonzeros of R (fill-in indicator)."""
        return int(self.R.nnz)

    @property
    def nnz_h(self) -> int:
        """Stored nonzeros of all reflectors."""
        return int(sum(len(h.rows) for h in self.reflectors))


def _queue_reflectors(
    rows: NDArray[np.intp],
    row_reflectors: dict[int, list[int]],
    pending: list[int],
    queued: set[int],
    after: int,
) -> None:
    """Push reflectors with index > after that touch any of rows onto the heap."""
    for row in rows.tolist():
        for i in row_reflectors.get(row, ()):
            if i > after and i not in queued:
                queued.add(i)
                heapq.heappush(pending, i)


def sparse_qr(
    X: sp.csc_matrix,
    ordering: OrderingChoice = 'min_degree',
    tol: float | None = None,
) -> SparseQRResult:
    """
    Sparse Householder QR with column ordering and rank detection.

    Args:
        X: Matrix to decompose (n x p), CSC float64
        ordering: Column ordering, see pyresiduals.core.compute.linalg.ordering
        tol: Rank threshold on the active column norm. Defaults to
             20 * (n + p) * eps * max_j ||X[:, j]||.

    Returns:
        SparseQRResult

    Raises:
        FactorizationError: If X has no nonzeros, no numerically independent
            column, or the factor contains non-finite values
    """
    n, p = X.shape
    if X.nnz == 0 or n == 0 or p == 0:
        raise FactorizationError(
            f"Cannot factorize a sparse matrix with no nonzero entries (shape {X.shape})",
            matrix_name='X',
            shape=(n, p),
            nnz=int(X.nnz),
        )

    order = column_ordering(X, ordering)
    Xp = X[:, order].tocsc()
    Xp.sum_duplicates()

    max_norm = float(np.max(sparse_norm(Xp, axis=0)))
    threshold = tol if tol is not None else sparse_rank_tolerance(n, p, max_norm)

    work = np.zeros(n, dtype=np.float64)
    marked = np.zeros(n, dtype=bool)
    is_pivot = np.zeros(n, dtype=bool)
    rank_of_row = np.full(n, -1, dtype=np.intp)

    reflectors: list[Reflector] = []
    row_reflectors: dict[int, list[int]] = {}
    live: list[int] = []
    r_rows: list[NDArray[np.intp]] = []
    r_cols: list[NDArray[np.intp]] = []
    r_vals: list[NDArray[np.floating[Any]]] = []

    for k in range(p):
        start, end = Xp.indptr[k], Xp.indptr[k + 1]
        rows = Xp.indices[start:end]
        work[rows] = Xp.data[start:end]
        marked[rows] = True
        touched = [rows]

        # === Apply earlier reflectors reachable from the column's rows ===
        pending: list[int] = []
        queued: set[int] = set()
        _queue_reflectors(rows, row_reflectors, pending, queued, after=-1)
        while pending:
            i = heapq.heappop(pending)
            h = reflectors[i]
            h.apply(work)
            new_rows = h.rows[~marked[h.rows]]
            if new_rows.size:
                marked[new_rows] = True
                touched.append(new_rows)
                # Reflectors before i saw zeros on these rows
                _queue_reflectors(new_rows, row_reflectors, pending, queued, after=i)

        support = np.sort(np.concatenate(touched))
        values = work[support]

        # === Entries of R above the diagonal ===
        finished = is_pivot[support] & (values != 0.0)
        if finished.any():
            r_rows.append(rank_of_row[support[finished]])
            r_cols.append(np.full(int(finished.sum()), k, dtype=np.intp))
            r_vals.append(values[finished])

        # === Active part: new reflector or dead column ===
        active = ~is_pivot[support] & (values != 0.0)
        a_rows = support[active]
        x = values[active]
        norm = float(np.linalg.norm(x)) if x.size else 0.0

        if not norm <= threshold:
            j = int(np.argmax(np.abs(x)))
            sign = 1.0 if x[j] >= 0 else -1.0
            alpha = -sign * norm
            v = x.copy()
            v[j] -= alpha
            beta = 1.0 / (norm * (norm + abs(x[j])))
            pivot_row = int(a_rows[j])

            for row in a_rows.tolist():
                row_reflectors.setdefault(row, []).append(len(reflectors))
            reflectors.append(Reflector(rows=a_rows, values=v, beta=beta, pivot_row=pivot_row))
            rank = len(live)
            r_rows.append(np.array([rank], dtype=np.intp))
            r_cols.append(np.array([k], dtype=np.intp))
            r_vals.append(np.array([alpha]))
            is_pivot[pivot_row] = True
            rank_of_row[pivot_row] = rank
            live.append(k)

        work[support] = 0.0
        marked[support] = False

    rank = len(live)
    if rank == 0:
        raise FactorizationError(
            "Design matrix has no numerically independent columns (rank 0)",
            matrix_name='X',
            shape=(n, p),
            nnz=int(X.nnz),
        )

    data = np.concatenate(r_vals)
    if not np.all(np.isfinite(data)):
        raise FactorizationError(
            "Sparse QR produced non-finite entries in R; X contains NaN or Inf",
            matrix_name='X',
            shape=(n, p),
            nnz=int(X.nnz),
        )

    R = sp.csc_matrix(
        (data, (np.concatenate(r_rows), np.concatenate(r_cols))),
        shape=(rank, p),
    )

    return SparseQRResult(
        reflectors=tuple(reflectors),
        R=R,
        column_order=order,
        live=np.asarray(live, dtype=np.intp),
        rank=rank,
        tol=float(threshold),
        shape=(n, p),
    )


def apply_qt(
    qr_result: SparseQRResult,
    Y: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """
    Compute Q'Y restricted to the pivot rows, in rank order.

    Works on a copy of Y; the caller's array is not modified.

    Args:
        qr_result: Sparse factorization of X
        Y: Dense outcome (n,) or (n x k)

    Returns:
        (rank,) or (rank x k) array
    """
    QtY = np.array(Y, dtype=np.float64, copy=True)
    for h in qr_result.reflectors:
        h.apply(QtY)
    return QtY[qr_result.pivot_rows]


def solve_sparse_qr(
    qr_result: SparseQRResult,
    Y: NDArray[np.floating[Any]],
    check_rank: bool,
) -> NDArray[np.floating[Any]]:
    """
    Least-squares coefficients from an existing sparse QR factorization.

    Solves
        R[:, live] β_live = (Q'Y)[pivot rows]
    and fixes β of dead columns at zero, then undoes the column ordering.

    Args:
        qr_result: Factorization of X from sparse_qr
        Y: Dense outcome (n,) or (n x k)
        check_rank: If True, raise SingularMatrixError on rank-deficient X

    Returns:
        β with shape (p,) or (p, k) following Y

    Raises:
        SingularMatrixError: If X is rank-deficient and check_rank=True
    """
    p = qr_result.shape[1]
    r = qr_result.rank

    if check_rank and r < p:
        raise SingularMatrixError(
            f"Design matrix is rank-deficient: rank={r}, expected={p}. "
            f"This indicates perfect multicollinearity.",
            matrix_name='X',
            rank=r,
            expected_rank=p
        )

    c = apply_qt(qr_result, Y)

    # R restricted to live columns is square upper triangular
    R_live = qr_result.R[:, qr_result.live].tocsr()
    beta_live = spsolve_triangular(R_live, c, lower=False)

    beta_perm = np.zeros((p,) + Y.shape[1:], dtype=np.float64)
    beta_perm[qr_result.live] = np.reshape(beta_live, (r,) + Y.shape[1:])

    beta = np.zeros_like(beta_perm)
    beta[qr_result.column_order] = beta_perm

    return beta


def sparse_qr_solve(
    X: sp.csc_matrix,
    Y: NDArray[np.floating[Any]],
    check_rank: bool,
    ordering: OrderingChoice = 'min_degree',
    tol: float | None = None,
) -> tuple[NDArray[np.floating[Any]], SparseQRResult]:
    """
    Solve least squares via sparse QR decomposition.

    Solves: min_β ||Y - Xβ||² column by column. See solve_sparse_qr.

    Args:
        X: Design matrix (n x p), CSC float64
        Y: Dense outcome (n,) or (n x k)
        check_rank: If True, raise SingularMatrixError on rank-deficient X
        ordering: Column ordering for the factorization
        tol: Rank threshold, see sparse_qr

    Returns:
        Tuple (β, qr_result); β has shape (p,) or (p, k) following Y

    Raises:
        FactorizationError: If the factorization has no usable triangular factor
        SingularMatrixError: If X is rank-deficient and check_rank=True
    """
    qr_result = sparse_qr(X, ordering=ordering, tol=tol)
    return solve_sparse_qr(qr_result, Y, check_rank), qr_result

"""
SuiteSparseQR backend for least-squares residuals.

Performance path for large sparse problems through PySPQR (`sparseqr`),
validated against the in-package sparse QR. SuiteSparseQR applies its own
default fill-reducing ordering, so the ordering is not configurable here.

Requires the optional dependency: pip install pyresiduals[spqr]
"""

from typing import Any
import numpy as np
from scipy.sparse.linalg import spsolve_triangular

from pyresiduals.core.result import Result
from pyresiduals.core.exceptions import (
    FactorizationError,
    SingularMatrixError,
    ValidationError,
)
from pyresiduals.core.validation import check_tolerance
from pyresiduals.core.compute.timing import Timer
from pyresiduals.residuals.design import Design
from pyresiduals.residuals.solution import ResidualParams
from pyresiduals.residuals._common import fitted_and_residuals, rank_warnings


class SPQRBackend:
    """
    Sparse QR backend using SuiteSparseQR.

    Implements the Backend protocol for Design -> ResidualParams with the
    same rank-deficiency policy as the in-package solvers: dead columns
    get a zero coefficient unless check_rank=True.
    """

    def __init__(self, check_rank: bool = False, tol: float | None = None):
        """
        Args:
            check_rank: Raise SingularMatrixError on rank-deficient X
            tol: SuiteSparseQR rank tolerance; None selects its default

        Raises:
            ImportError: If sparseqr is not installed
        """
        try:
            import sparseqr
        except ImportError as e:
            raise ImportError(
                "The 'spqr' backend requires sparseqr (PySPQR) and SuiteSparse. "
                "Install with: pip install pyresiduals[spqr]"
            ) from e

        check_tolerance(tol)
        self._sparseqr = sparseqr
        self.check_rank = check_rank
        self.tol = tol

    @property
    def name(self) -> str:
        return 'spqr'

    def solve(self, design: Design) -> Result[ResidualParams]:
        """
        Compute residuals via SuiteSparseQR.

        Algorithm:
            1. Factorize: X E = Q R (economy), numerical rank r
            2. Solve R[:r,:r] z = (Q'Y)[:r], β[E[:r]] = z, remaining β = 0
            3. Residuals: Y - Xβ

        Raises:
            ValidationError: If the design holds a dense X
            FactorizationError: If X has rank 0
            SingularMatrixError: If X is rank-deficient and check_rank=True
        """
        if not design.is_sparse:
            raise ValidationError(
                f"{self.name}: requires a scipy.sparse X; use the 'cpu_qr' backend "
                f"for dense arrays"
            )

        timer = Timer()
        timer.start()

        X = design.X
        Y = design.Y
        n, p = design.n, design.p

        with timer.section('factorization'):
            Q, R, E, rank = self._sparseqr.qr(X, tolerance=self.tol, economy=True)
            rank = int(rank)
            E = np.asarray(E, dtype=np.intp).ravel()

        if rank == 0:
            raise FactorizationError(
                "Design matrix has no numerically independent columns (rank 0)",
                matrix_name='X',
                shape=(n, p),
                nnz=design.nnz,
            )

        if self.check_rank and rank < p:
            raise SingularMatrixError(
                f"Design matrix is rank-deficient: rank={rank}, expected={p}. "
                f"This indicates perfect multicollinearity.",
                matrix_name='X',
                rank=rank,
                expected_rank=p
            )

        with timer.section('solve'):
            Q = Q.tocsc()[:, :rank]
            R11 = R.tocsr()[:rank, :rank]
            c = np.asarray(Q.T @ Y).reshape((rank,) + Y.shape[1:])
            z = spsolve_triangular(R11, c, lower=False)
            coefficients = np.zeros((p,) + Y.shape[1:], dtype=np.float64)
            coefficients[E[:rank]] = np.reshape(z, (rank,) + Y.shape[1:])

        with timer.section('residuals'):
            fitted_values, residuals = fitted_and_residuals(X, Y, coefficients)

        timer.stop()

        params = ResidualParams(
            residuals=residuals,
            coefficients=coefficients,
            fitted_values=fitted_values,
            rank=rank,
        )

        info: dict[str, Any] = {
            'method': 'suitesparse_qr',
            'ordering': 'spqr_default',
            'rank': rank,
            'column_order': E.tolist(),
            'nnz_x': design.nnz,
            'nnz_r': int(R.nnz),
            'outcome_densified': design.outcome_was_sparse,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=rank_warnings(rank, p),
        )

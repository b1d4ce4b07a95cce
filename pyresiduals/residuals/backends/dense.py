"""
Dense QR backend for least-squares residuals.

Uses column-pivoted Householder QR via LAPACK (through SciPy). X'X is
never formed. This is the reference implementation the other backends
are compared against.
"""

from typing import Any

from pyresiduals.core.result import Result
from pyresiduals.core.exceptions import ValidationError
from pyresiduals.core.validation import check_tolerance
from pyresiduals.core.compute.timing import Timer
from pyresiduals.core.compute.linalg.qr import qr_cpu, solve_qr
from pyresiduals.residuals.design import Design
from pyresiduals.residuals.solution import ResidualParams
from pyresiduals.residuals._common import fitted_and_residuals, rank_warnings


class DenseQRBackend:
    """
    CPU backend using dense pivoted QR decomposition.

    Implements the Backend protocol for Design -> ResidualParams.

    Rank-deficient X is solved on its numerically independent columns
    unless check_rank=True, in which case SingularMatrixError is raised.
    """

    def __init__(self, check_rank: bool = False, tol: float | None = None):
        """
        Args:
            check_rank: Raise SingularMatrixError instead of solving a
                rank-deficient X on its independent columns
            tol: Rank threshold on |R_ii|; None selects the default
        """
        check_tolerance(tol)
        self.check_rank = check_rank
        self.tol = tol

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: Design) -> Result[ResidualParams]:
        """
        Compute residuals via pivoted QR decomposition.

        Algorithm:
            1. Factorize: X P = QR
            2. Solve: β[P[:r]] = R[:r,:r]⁻¹ (Q'Y)[:r], remaining β = 0
            3. Residuals: Y - Xβ

        Args:
            design: Validated dense design

        Returns:
            Result containing ResidualParams

        Raises:
            ValidationError: If the design holds a sparse X
            FactorizationError: If X has no usable triangular factor
            SingularMatrixError: If X is rank-deficient and check_rank=True
        """
        if design.is_sparse:
            raise ValidationError(
                f"{self.name}: requires a dense X; use the 'cpu_sparse_qr' backend "
                f"for sparse matrices"
            )

        timer = Timer()
        timer.start()

        X = design.X
        Y = design.Y

        with timer.section('factorization'):
            qr_result = qr_cpu(X, tol=self.tol)

        with timer.section('solve'):
            coefficients = solve_qr(qr_result, Y, check_rank=self.check_rank)

        with timer.section('residuals'):
            fitted_values, residuals = fitted_and_residuals(X, Y, coefficients)

        timer.stop()

        params = ResidualParams(
            residuals=residuals,
            coefficients=coefficients,
            fitted_values=fitted_values,
            rank=qr_result.rank,
        )

        info: dict[str, Any] = {
            'method': 'householder_qr_pivoted',
            'rank': qr_result.rank,
            'column_order': qr_result.pivot.tolist(),
            'tol': qr_result.tol,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=rank_warnings(qr_result.rank, design.p),
        )

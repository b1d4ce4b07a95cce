"""
Comparison baselines for least-squares residuals.

These are not QR solvers; they exist so a benchmark can time the QR
backends against the usual alternatives behind the same Backend
protocol.

NormalEquationsBackend: Cholesky of X'X. Fast, but squares the condition
    number of X and fails outright on rank-deficient X.
LstsqBackend: SVD-based minimum-norm solve (LAPACK gelsd via SciPy).
"""

from typing import Any
import numpy as np
from scipy import linalg

from pyresiduals.core.result import Result
from pyresiduals.core.exceptions import (
    NotPositiveDefiniteError,
    FactorizationError,
    ValidationError,
)
from pyresiduals.core.compute.timing import Timer
from pyresiduals.residuals.design import Design
from pyresiduals.residuals.solution import ResidualParams
from pyresiduals.residuals._common import fitted_and_residuals, rank_warnings


def _require_dense(design: Design, name: str) -> None:
    if design.is_sparse:
        raise ValidationError(f"{name}: baseline backends accept dense X only")


class NormalEquationsBackend:
    """
    Baseline backend solving the normal equations X'X β = X'Y.

    Algorithm:
        1. XtX = X'X, XtY = X'Y
        2. L = cholesky(XtX)
        3. Solve L Z = XtY, then L' β = Z
    """

    @property
    def name(self) -> str:
        return 'cpu_normal'

    def solve(self, design: Design) -> Result[ResidualParams]:
        """
        Raises:
            ValidationError: If the design holds a sparse X
            NotPositiveDefiniteError: If X'X is not positive definite
        """
        _require_dense(design, self.name)

        timer = Timer()
        timer.start()

        X = design.X
        Y = design.Y

        with timer.section('factorization'):
            XtX = X.T @ X
            try:
                L = np.linalg.cholesky(XtX)
            except np.linalg.LinAlgError as e:
                raise NotPositiveDefiniteError(
                    f"X'X is not positive definite ({e}); X is rank-deficient "
                    f"or too ill-conditioned for the normal equations",
                    matrix_name="X'X",
                ) from e

        with timer.section('solve'):
            Z = linalg.solve_triangular(L, X.T @ Y, lower=True, check_finite=False)
            coefficients = linalg.solve_triangular(L.T, Z, lower=False, check_finite=False)

        with timer.section('residuals'):
            fitted_values, residuals = fitted_and_residuals(X, Y, coefficients)

        timer.stop()

        params = ResidualParams(
            residuals=residuals,
            coefficients=coefficients,
            fitted_values=fitted_values,
            rank=design.p,
        )

        info: dict[str, Any] = {
            'method': 'normal_equations_cholesky',
            'rank': design.p,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )


class LstsqBackend:
    """
    Baseline backend using SciPy's SVD least-squares driver.

    Returns the minimum-norm solution, so rank-deficient X is handled
    without a rank check.
    """

    def __init__(self, cond: float | None = None):
        """
        Args:
            cond: Relative cutoff for small singular values; None selects
                the LAPACK default
        """
        self.cond = cond

    @property
    def name(self) -> str:
        return 'cpu_lstsq'

    def solve(self, design: Design) -> Result[ResidualParams]:
        """
        Raises:
            ValidationError: If the design holds a sparse X
            FactorizationError: If the SVD fails or X has rank 0
        """
        _require_dense(design, self.name)

        timer = Timer()
        timer.start()

        X = design.X
        Y = design.Y

        with timer.section('solve'):
            try:
                coefficients, _, rank, _ = linalg.lstsq(X, Y, cond=self.cond)
            except (ValueError, linalg.LinAlgError) as e:
                raise FactorizationError(
                    f"SVD least-squares solve failed: {e}",
                    matrix_name='X',
                    shape=(design.n, design.p),
                ) from e

        rank = int(rank)
        if rank == 0:
            raise FactorizationError(
                "Design matrix has no numerically independent columns (rank 0)",
                matrix_name='X',
                shape=(design.n, design.p),
            )

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
            'method': 'svd_lstsq',
            'rank': rank,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=rank_warnings(rank, design.p),
        )

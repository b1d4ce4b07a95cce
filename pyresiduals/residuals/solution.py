"""
Residual solution types.

Contains the parameter payload and user-facing solution wrapper.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
import scipy.sparse as sp
from numpy.typing import NDArray

from pyresiduals.core.result import Result

if TYPE_CHECKING:
    from pyresiduals.residuals.design import Design


@dataclass(frozen=True)
class ResidualParams:
    """
    Parameter payload for a residual computation.

    This is the immutable data computed by backends. Arrays follow the
    shape of Y: (n,) / (p,) for a vector outcome, (n, k) / (p, k) otherwise.
    """
    residuals: NDArray[np.floating[Any]]
    coefficients: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rank: int


@dataclass
class ResidualSolution:
    """
    User-facing residual results.

    Wraps the backend Result and hands the residuals back in the
    density class of the outcome: dense Y gives an ndarray, sparse Y a
    CSC matrix.
    """
    _result: Result[ResidualParams]
    _design: 'Design'

    # Cached computations
    _sparse_residuals: sp.csc_matrix | None = None

    @property
    def residuals(self) -> NDArray[np.floating[Any]] | sp.csc_matrix:
        """Y - X β̂, same shape (and density class) as Y."""
        if not self._design.outcome_was_sparse:
            return self._result.params.residuals
        if self._sparse_residuals is None:
            self._sparse_residuals = sp.csc_matrix(self._result.params.residuals)
        return self._sparse_residuals

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def rss(self) -> float | NDArray[np.floating[Any]]:
        """Residual sum of squares; one value per outcome column for matrix Y."""
        r = self._result.params.residuals
        if r.ndim == 1:
            return float(r @ r)
        return np.einsum('ij,ij->j', r, r)

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def is_rank_deficient(self) -> bool:
        return self.rank < self._design.p

    @property
    def column_order(self) -> NDArray[np.intp] | None:
        """Column permutation used by the factorization, if the backend reports one."""
        order = self._result.info.get('column_order')
        return None if order is None else np.asarray(order, dtype=np.intp)

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Plain-text summary of the computation."""
        rss = np.atleast_1d(self.rss)
        lines = [
            "Least-Squares Residuals",
            "=" * 60,
            f"Observations: {self._design.n}",
            f"Columns of X: {self._design.p}",
            f"Outcome columns: {self._design.k}",
            f"Storage: {'sparse' if self._design.is_sparse else 'dense'} "
            f"(nnz={self._design.nnz})",
            f"Rank: {self.rank}",
            "",
            "Residual sum of squares:",
            "-" * 60,
        ]

        for j, value in enumerate(rss):
            lines.append(f"  Y[{j}]: {value:18.10g}")

        lines.append("-" * 60)
        if 'ordering' in self.info:
            lines.append(f"Ordering: {self.info['ordering']}")
        if 'nnz_r' in self.info:
            lines.append(f"nnz(R): {self.info['nnz_r']}")
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        for w in self.warnings:
            lines.append(f"Warning: {w}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"ResidualSolution(n={self._design.n}, p={self._design.p}, "
            f"k={self._design.k}, rank={self.rank}, backend={self.backend_name!r})"
        )

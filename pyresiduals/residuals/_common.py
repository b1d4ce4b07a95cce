"""
Helpers shared by the residual backends.
"""

from typing import Any
import numpy as np
import scipy.sparse as sp
from numpy.typing import NDArray


def fitted_and_residuals(
    X: NDArray[np.floating[Any]] | sp.spmatrix,
    Y: NDArray[np.floating[Any]],
    beta: NDArray[np.floating[Any]],
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """
    Fitted values X β and residuals Y - X β.

    Both are freshly allocated and have the shape of Y. For sparse X the
    product stays sparse-times-dense.
    """
    fitted = np.asarray(X @ beta, dtype=np.float64).reshape(Y.shape)
    return fitted, Y - fitted


def rank_warnings(rank: int, p: int) -> tuple[str, ...]:
    """Warning tuple for a rank-deficient fit, empty at full column rank."""
    if rank >= p:
        return ()
    return (
        f"rank-deficient design: rank={rank} < p={p}; coefficients of "
        f"{p - rank} dependent column(s) fixed at zero",
    )

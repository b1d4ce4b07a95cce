"""
Tolerance tiers and rank thresholds.

Two kinds of tolerance live here:
- Comparison tiers used by the test suite and benchmarks to decide
  whether two residual matrices agree.
- Rank thresholds used by the QR kernels to decide when a pivot is
  numerically zero.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# QR vs QR (dense vs sparse, different orderings)
CPU_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-10,
    name='cpu_fp64',
    description='CPU double precision, well-conditioned X',
)

# QR vs normal equations: cond(X'X) = cond(X)^2 costs digits
CPU_FP64_NORMAL_EQUATIONS = ToleranceTier(
    rtol=1e-8,
    atol=1e-8,
    name='cpu_fp64_normal_equations',
    description='CPU double precision, compared against a normal-equation solve',
)

# CPU, ill-conditioned problems (cond > 1e4)
CPU_FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-4,
    atol=1e-6,
    name='cpu_fp64_ill_conditioned',
    description='CPU double precision, ill-conditioned (cond > 1e4)',
)


def select_tolerance(
    backend_name: str,
    is_ill_conditioned: bool = False,
) -> ToleranceTier:
    """Select the comparison tier for a backend's output against a QR reference."""
    if is_ill_conditioned:
        return CPU_FP64_ILL_CONDITIONED
    if backend_name == 'cpu_normal':
        return CPU_FP64_NORMAL_EQUATIONS
    return CPU_FP64


def dense_rank_tolerance(n: int, p: int, max_abs_diag: float) -> float:
    """
    Rank threshold for a column-pivoted dense QR.

    With pivoting, |R_00| is the largest diagonal entry, so diagonal
    entries below max(n, p) * eps * |R_00| are treated as zero.
    """
    return max(n, p) * float(np.finfo(np.float64).eps) * max_abs_diag


def sparse_rank_tolerance(n: int, p: int, max_column_norm: float) -> float:
    """
    Rank threshold for the sparse Householder QR.

    20 * (n + p) * eps * max_j ||X[:, j]||_2, the default used by
    SuiteSparseQR and Eigen's SparseQR. Columns whose remaining norm
    falls below it are dead.
    """
    return 20.0 * (n + p) * float(np.finfo(np.float64).eps) * max_column_norm

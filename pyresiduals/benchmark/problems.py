"""
Synthetic least-squares problems for benchmarking.

Each builder draws X and Y from a caller-supplied Generator, so a
benchmark is reproducible from its seed alone.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
import scipy.sparse as sp

from pyresiduals.core.exceptions import ValidationError


@dataclass(frozen=True)
class Problem:
    """A named (X, Y) pair to benchmark strategies on."""
    name: str
    X: Any
    Y: Any

    @property
    def shape(self) -> tuple[int, int, int]:
        """(n, p, k) with k = 1 for a 1-D outcome."""
        n, p = self.X.shape
        k = 1 if len(self.Y.shape) == 1 else self.Y.shape[1]
        return n, p, k

    @property
    def is_sparse(self) -> bool:
        return sp.issparse(self.X)


def _check_sizes(n: int, p: int, k: int) -> None:
    if n < 1 or p < 1 or k < 1:
        raise ValidationError(
            f"Problem sizes must be positive, got n={n}, p={p}, k={k}"
        )


def make_dense_problem(
    n: int,
    p: int,
    k: int,
    rng: np.random.Generator,
    name: str | None = None,
) -> Problem:
    """
    Gaussian dense problem: X (n x p), Y (n x k) standard normal.

    Args:
        n: Number of rows
        p: Number of columns of X
        k: Number of outcome columns
        rng: Random generator
        name: Problem label; defaults to 'dense_{n}x{p}x{k}'

    Returns:
        Problem with dense X and Y
    """
    _check_sizes(n, p, k)
    X = rng.standard_normal((n, p))
    Y = rng.standard_normal((n, k))
    return Problem(name=name or f"dense_{n}x{p}x{k}", X=X, Y=Y)


def make_sparse_problem(
    n: int,
    p: int,
    k: int,
    density: float,
    rng: np.random.Generator,
    name: str | None = None,
    sparse_outcome: bool = False,
) -> Problem:
    """
    Random sparse problem with Gaussian nonzeros.

    X is CSC with the given density; Y is dense standard normal unless
    sparse_outcome=True, in which case it is drawn with the same density.

    Args:
        n: Number of rows
        p: Number of columns of X
        k: Number of outcome columns
        density: Fraction of nonzero entries, in (0, 1]
        rng: Random generator
        name: Problem label; defaults to 'sparse_{n}x{p}x{k}_d{density}'
        sparse_outcome: Draw Y as a sparse CSC matrix

    Returns:
        Problem with sparse X
    """
    _check_sizes(n, p, k)
    if not 0.0 < density <= 1.0:
        raise ValidationError(f"density must be in (0, 1], got {density}")

    X = sp.random(
        n, p, density=density, format='csc', random_state=rng,
        data_rvs=rng.standard_normal,
    )
    if sparse_outcome:
        Y = sp.random(
            n, k, density=density, format='csc', random_state=rng,
            data_rvs=rng.standard_normal,
        )
    else:
        Y = rng.standard_normal((n, k))

    return Problem(name=name or f"sparse_{n}x{p}x{k}_d{density:g}", X=X, Y=Y)

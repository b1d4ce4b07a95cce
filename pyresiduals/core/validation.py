"""
Input validation utilities for pyresiduals.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent. They run before any
factorization so a bad call costs almost nothing.

Design principles:
    - No silent type coercion (except conversion to float64 arrays)
    - Values are not screened for NaN/Inf; that is the factorization's job
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numpy as np
import scipy.sparse as sp
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pyresiduals.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Accepts any array-like and converts to numpy array. Rejects inputs
    that result in object dtype (indicating mixed types or non-numeric data)
    and sparse matrices, which must go through check_sparse.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with float64 dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    if sp.issparse(array):
        raise ValidationError(
            f"{name}: got a sparse {type(array).__name__}, expected a dense array"
        )

    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if np.issubdtype(result.dtype, np.complexfloating):
        raise ValidationError(f"{name}: complex dtype {result.dtype}, expected real data")

    if result.dtype != np.float64:
        result = result.astype(np.float64)

    return result


def check_sparse(matrix: Any, name: str) -> sp.csc_matrix:
    """
    Validate a scipy.sparse input and convert it to float64 CSC.

    CSC is the layout the sparse QR kernel walks column by column.
    The conversion never densifies.

    Args:
        matrix: Input to validate
        name: Parameter name for error messages

    Returns:
        scipy.sparse.csc_matrix with float64 data

    Raises:
        ValidationError: If input is not a real numeric scipy.sparse matrix
    """
    if not sp.issparse(matrix):
        raise ValidationError(
            f"{name}: expected a scipy.sparse matrix, got {type(matrix).__name__}"
        )

    if not np.issubdtype(matrix.dtype, np.number) or np.issubdtype(
        matrix.dtype, np.complexfloating
    ):
        raise ValidationError(
            f"{name}: dtype {matrix.dtype} is not a real numeric type"
        )

    result = sp.csc_matrix(matrix, dtype=np.float64)
    result.sum_duplicates()
    return result


def check_ndim(array: Any, ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Args:
        array: Array to check
        ndim: Required number of dimensions
        name: Parameter name for error messages

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_2d(array: Any, name: str) -> None:
    """
    Verify array is 2-dimensional.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        DimensionError: If array is not 2D
    """
    check_ndim(array, 2, name)


def check_outcome_ndim(array: Any, name: str) -> None:
    """
    Verify an outcome is a vector (n,) or a matrix (n, k).

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        DimensionError: If array is neither 1D nor 2D
    """
    if array.ndim not in (1, 2):
        raise DimensionError(
            f"{name}: expected 1D or 2D array, got {array.ndim}D with shape {array.shape}"
        )


def check_consistent_length(
    *arrays: Any,
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    This is the shared pre-check of both solvers: a row mismatch between
    X and Y is rejected here, never broadcast.

    Args:
        *arrays: Arrays (dense or sparse) to check
        names: Parameter names for error messages (must match number of arrays)

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_min_samples(array: Any, min_samples: int, name: str) -> None:
    """
    Verify array has at least the minimum number of samples.

    Args:
        array: Array to check
        min_samples: Minimum required samples (first dimension)
        name: Parameter name for error messages

    Raises:
        ValidationError: If array has fewer than min_samples
    """
    n = array.shape[0]
    if n < min_samples:
        raise ValidationError(
            f"{name}: requires at least {min_samples} samples, got {n}"
        )


def check_min_columns(array: Any, min_columns: int, name: str) -> None:
    """
    Verify a 2D array has at least the minimum number of columns.

    A 1D array counts as a single column.

    Args:
        array: Array to check
        min_columns: Minimum required columns (second dimension)
        name: Parameter name for error messages

    Raises:
        ValidationError: If array has fewer than min_columns
    """
    k = 1 if array.ndim == 1 else array.shape[1]
    if k < min_columns:
        raise ValidationError(
            f"{name}: requires at least {min_columns} column(s), got {k}"
        )


def check_tolerance(tol: float | None, name: str = 'tol') -> None:
    """
    Verify a user-supplied rank tolerance is None or a finite, non-negative number.

    Raises:
        ValidationError: If tol is negative or not finite
    """
    if tol is None:
        return
    if not np.isfinite(tol) or tol < 0:
        raise ValidationError(f"{name}: must be a finite non-negative number, got {tol!r}")

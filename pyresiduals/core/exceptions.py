"""
Exception hierarchy for pyresiduals.

All exceptions inherit from PyResidualsError so a caller (typically a
benchmark harness) can catch any library failure in one place and record
it as a failed run.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyResidualsError(Exception):
    """Base exception for all pyresiduals errors."""
    pass


class ValidationError(PyResidualsError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when X and Y disagree on the number of rows, or when an input
    has the wrong number of dimensions. Always raised before any
    factorization work starts.
    """
    pass


class NumericalError(PyResidualsError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class FactorizationError(NumericalError):
    """
    The QR factorization did not produce a usable triangular factor.

    Raised when X has no numerically independent column (all zeros, or
    every column dead under the rank tolerance) or when the factor
    contains non-finite values.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        shape: Shape of the matrix that failed to factorize
        nnz: Number of stored nonzeros, for sparse inputs
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        shape: tuple[int, int] | None = None,
        nnz: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.shape = shape
        self.nnz = nnz


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised by the QR solvers when X is numerically rank-deficient and the
    caller asked for a strict rank check (check_rank=True).

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (number of columns of X)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not positive definite.

    Raised by the normal-equation baseline when the Cholesky factorization
    of X'X fails.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        min_eigenvalue: Minimum eigenvalue, if computed
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        min_eigenvalue: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.min_eigenvalue = min_eigenvalue

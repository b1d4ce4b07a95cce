"""
Core infrastructure for pyresiduals.

This module provides shared abstractions and utilities used by the
residual solvers and the benchmark harness.

Key components:
    protocols: Backend protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators (the shared pre-check)
    compute: Timing, tolerances, QR kernels
"""

from pyresiduals.core.protocols import Backend
from pyresiduals.core.result import Result
from pyresiduals.core.exceptions import (
    PyResidualsError,
    ValidationError,
    DimensionError,
    NumericalError,
    FactorizationError,
    SingularMatrixError,
    NotPositiveDefiniteError,
)

__all__ = [
    # Protocols
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyResidualsError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "FactorizationError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
]

"""
Core protocols for pyresiduals.

These define structural interfaces that backends must satisfy. We use
Protocol (structural typing) rather than ABC (nominal typing) so that
comparison baselines can be dropped in next to the QR solvers without
inheriting from anything.
"""

from typing import Protocol, TypeVar, runtime_checkable

# Type variables for generic payloads
P = TypeVar('P', covariant=True)  # Parameter payload type
D = TypeVar('D', contravariant=True)  # Design type


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for residual backends.

    Each backend takes a validated design (X, Y) and produces a
    Result envelope with a residual payload. Backends are stateless
    beyond their immutable construction-time configuration, so one
    instance may serve any number of calls.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}'
        Examples: 'cpu_qr', 'cpu_sparse_qr', 'cpu_normal', 'spqr'
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Compute least-squares residuals.

        Args:
            design: Validated design holding X and Y

        Returns:
            Result envelope containing the residual payload and metadata

        Raises:
            FactorizationError: If no usable triangular factor exists
            SingularMatrixError: If X is rank-deficient and the backend is strict
            ValidationError: If design is invalid for this backend
        """
        ...

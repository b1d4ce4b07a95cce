"""
Shared compute infrastructure for pyresiduals.

This module provides timing utilities, tolerance tiers, and the linear
algebra kernels the residual backends are built on.

Submodules:
    timing: Execution timing utilities
    tolerances: Comparison tiers and rank thresholds
    linalg: QR kernels (dense, sparse) and column orderings
"""

from pyresiduals.core.compute.timing import Timer, timed

__all__ = [
    # Timing
    "Timer",
    "timed",
]

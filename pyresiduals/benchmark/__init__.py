"""
Benchmark harness for comparing residual strategies.

Public API:
    make_dense_problem(n, p, k, rng) -> Problem
    make_sparse_problem(n, p, k, density, rng) -> Problem
    run_benchmark(problems, strategies, results, repeats=3) -> BenchmarkResults

Example:
    >>> import numpy as np
    >>> from pyresiduals.benchmark import (
    ...     BenchmarkResults, make_dense_problem, run_benchmark,
    ... )
    >>> rng = np.random.default_rng(0)
    >>> problems = [make_dense_problem(200, 10, 2, rng)]
    >>> results = run_benchmark(problems, ['cpu_qr', 'cpu_normal'], BenchmarkResults())
    >>> print(results.summary())
"""

from pyresiduals.benchmark.problems import (
    Problem,
    make_dense_problem,
    make_sparse_problem,
)
from pyresiduals.benchmark.results import BenchmarkRecord, BenchmarkResults
from pyresiduals.benchmark.runner import run_benchmark

__all__ = [
    "Problem",
    "make_dense_problem",
    "make_sparse_problem",
    "BenchmarkRecord",
    "BenchmarkResults",
    "run_benchmark",
]

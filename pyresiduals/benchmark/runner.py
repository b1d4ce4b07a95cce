"""
Benchmark runner.

Times every strategy on every problem. A strategy that raises a library
error is recorded as a failed run and the benchmark moves on.
"""

import tracemalloc
import warnings
from typing import Iterable, Sequence

from pyresiduals.core.exceptions import PyResidualsError
from pyresiduals.core.compute.timing import Timer
from pyresiduals.residuals.solvers import BACKENDS, fit_residuals
from pyresiduals.benchmark.problems import Problem
from pyresiduals.benchmark.results import BenchmarkRecord, BenchmarkResults


def run_benchmark(
    problems: Iterable[Problem],
    strategies: Sequence[str],
    results: BenchmarkResults,
    *,
    repeats: int = 3,
) -> BenchmarkResults:
    """
    Run each strategy on each problem `repeats` times.

    Args:
        problems: Problems to solve
        strategies: Backend names accepted by fit_residuals()
        results: Collection the records are appended to
        repeats: Timed runs per (problem, strategy)

    Returns:
        The same results object, for chaining

    Raises:
        ValueError: If a strategy name is unknown or repeats < 1

    Warns:
        RuntimeWarning: For every run that raised a PyResidualsError
    """
    if repeats < 1:
        raise ValueError(f"repeats must be >= 1, got {repeats}")
    for strategy in strategies:
        if strategy not in BACKENDS:
            raise ValueError(f"Unknown backend: {strategy!r}")

    for problem in problems:
        for strategy in strategies:
            for repeat in range(repeats):
                results.add(_run_once(problem, strategy, repeat))

    return results


def _run_once(problem: Problem, strategy: str, repeat: int) -> BenchmarkRecord:
    # Leave a caller's tracemalloc session running
    owns_tracing = not tracemalloc.is_tracing()
    if owns_tracing:
        tracemalloc.start()
    else:
        tracemalloc.reset_peak()

    timer = Timer()
    error: PyResidualsError | None = None
    try:
        timer.start()
        try:
            fit_residuals(problem.X, problem.Y, backend=strategy)
        except PyResidualsError as e:
            error = e
        timer.stop()
        _, peak = tracemalloc.get_traced_memory()
    finally:
        if owns_tracing:
            tracemalloc.stop()

    if error is not None:
        message = f"{type(error).__name__}: {error}"
        warnings.warn(
            f"{strategy} failed on {problem.name} (repeat {repeat}): {message}",
            RuntimeWarning,
            stacklevel=3,
        )
        return BenchmarkRecord(
            problem=problem.name,
            strategy=strategy,
            repeat=repeat,
            seconds=None,
            peak_bytes=None,
            ok=False,
            error=message,
        )

    return BenchmarkRecord(
        problem=problem.name,
        strategy=strategy,
        repeat=repeat,
        seconds=timer.elapsed,
        peak_bytes=int(peak),
        ok=True,
    )

"""
Benchmark result collection.

BenchmarkResults is owned by the caller and filled by run_benchmark();
nothing is kept in module state.
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass(frozen=True)
class BenchmarkRecord:
    """One timed run of one strategy on one problem."""
    problem: str
    strategy: str
    repeat: int
    seconds: float | None
    peak_bytes: int | None
    ok: bool
    error: str | None = None


@dataclass
class BenchmarkResults:
    """
    Accumulated benchmark records.

    Usage:
        results = BenchmarkResults()
        run_benchmark(problems, ['cpu_qr', 'cpu_lstsq'], results)
        print(results.summary())
    """
    _records: list[BenchmarkRecord] = field(default_factory=list)

    def add(self, record: BenchmarkRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> tuple[BenchmarkRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def failures(self) -> tuple[BenchmarkRecord, ...]:
        """Records of runs that raised."""
        return tuple(r for r in self._records if not r.ok)

    def median_seconds(self) -> dict[tuple[str, str], float]:
        """
        Median wall time per (problem, strategy) over successful runs.

        Pairs with no successful run are omitted.
        """
        grouped: dict[tuple[str, str], list[float]] = {}
        for r in self._records:
            if r.ok and r.seconds is not None:
                grouped.setdefault((r.problem, r.strategy), []).append(r.seconds)
        return {key: float(np.median(times)) for key, times in grouped.items()}

    def to_rows(self) -> list[dict[str, Any]]:
        """Records as plain dicts, e.g. for pandas.DataFrame(rows)."""
        return [
            {
                'problem': r.problem,
                'strategy': r.strategy,
                'repeat': r.repeat,
                'seconds': r.seconds,
                'peak_bytes': r.peak_bytes,
                'ok': r.ok,
                'error': r.error,
            }
            for r in self._records
        ]

    def summary(self) -> str:
        lines = []
        lines.append("Benchmark Results")
        lines.append("=" * 72)
        lines.append(
            f"{'problem':<28} {'strategy':<16} {'median ms':>12} {'failed':>8}"
        )
        lines.append("-" * 72)

        medians = self.median_seconds()
        pairs: list[tuple[str, str]] = []
        for r in self._records:
            if (r.problem, r.strategy) not in pairs:
                pairs.append((r.problem, r.strategy))

        for problem, strategy in pairs:
            n_failed = sum(
                1 for r in self._records
                if r.problem == problem and r.strategy == strategy and not r.ok
            )
            median = medians.get((problem, strategy))
            median_str = f"{median * 1000:.3f}" if median is not None else "-"
            lines.append(
                f"{problem:<28} {strategy:<16} {median_str:>12} {n_failed:>8}"
            )

        lines.append("-" * 72)
        lines.append(f"{len(self._records)} runs, {len(self.failures())} failed")
        return "\n".join(lines)

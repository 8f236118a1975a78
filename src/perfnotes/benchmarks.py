"""
benchmarks.py - Timing and memory harness

Every demonstration in this package follows the same measurement pattern:
write two implementations of one mathematical operation, run both under the
same harness, compare.  :class:`Benchmark` is that harness.

Timing notes
------------
* ``time.perf_counter`` is the highest-resolution monotonic clock available;
  wall-clock ``time.time`` can jump and has coarser resolution on some
  platforms.
* A single run is noise.  The harness repeats each call ``num_runs`` times
  and reports min / median / mean / max.  The *min* is the best estimate of
  the intrinsic cost (everything slower is interference); the *median* is the
  most robust central value; the *mean* is what the speedup row uses so the
  number matches what a user experiences on average.

Memory notes
------------
``tracemalloc`` only sees allocations made through Python's allocator.  numpy
routes its data buffers through it as well, so the peak of a pre-allocated
``np.empty(n)`` shows up as ~8n bytes while a growing list shows the list's
pointer array *plus* one boxed float object per element.
"""

import logging
import statistics
import time
import tracemalloc
from typing import Any, Callable, Dict, Sequence, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

STAT_ROWS = ("min", "median", "mean", "max", "std", "total", "num_runs")


def summarize(times: Sequence[float]) -> Dict[str, float]:
    """Descriptive statistics (seconds) of a non-empty list of run times."""
    if not times:
        raise ValueError("cannot summarize an empty list of timings")
    return {
        "min": min(times),
        "median": statistics.median(times),
        "mean": statistics.fmean(times),
        "max": max(times),
        "std": statistics.stdev(times) if len(times) > 1 else 0.0,
        "total": sum(times),
        "num_runs": len(times),
    }


class Benchmark:
    """
    Repeat-and-summarise harness for naive vs optimized comparisons.

    Methods are static; every result is a plain dict or a DataFrame so it can
    be printed, saved to CSV or plotted without further conversion.
    """

    @staticmethod
    def time_function(func: Callable, *args, num_runs: int = 100, **kwargs) -> Dict[str, float]:
        """
        Call ``func(*args, **kwargs)`` *num_runs* times and summarise.

        Returns
        -------
        dict with keys: min, median, mean, max, std, total, num_runs
        """
        if num_runs < 1:
            raise ValueError(f"num_runs must be positive, got {num_runs}")

        clock = time.perf_counter
        times = []
        for _ in range(num_runs):
            started = clock()
            func(*args, **kwargs)
            times.append(clock() - started)
        return summarize(times)

    @staticmethod
    def memory_profile(func: Callable, *args, **kwargs) -> Dict[str, Any]:
        """
        Peak traced memory while ``func(*args, **kwargs)`` runs.

        Returns
        -------
        dict with keys: peak_bytes, peak_kb, peak_mb, current_bytes,
                        num_allocations (line-level entries in the snapshot)
        """
        if tracemalloc.is_tracing():
            raise RuntimeError("memory_profile cannot nest inside another tracemalloc session")

        tracemalloc.start()
        try:
            func(*args, **kwargs)
            current, peak = tracemalloc.get_traced_memory()
            sites = len(tracemalloc.take_snapshot().statistics("lineno"))
        finally:
            tracemalloc.stop()

        return {
            "peak_bytes": peak,
            "peak_kb": peak / 1024,
            "peak_mb": peak / 1024 ** 2,
            "current_bytes": current,
            "num_allocations": sites,
        }

    @staticmethod
    def compare(
        func_a: Callable,
        func_b: Callable,
        *args,
        labels: Tuple[str, str] = ("A", "B"),
        num_runs: int = 100,
        memory: bool = False,
        **kwargs,
    ) -> pd.DataFrame:
        """
        Side-by-side timing statistics of two implementations.

        Columns are the two *labels*; rows are the :data:`STAT_ROWS` plus
        ``speedup`` (mean of A / mean of B, so B's column is always 1.0).
        With ``memory=True`` a ``peak_kb`` row from :meth:`memory_profile`
        is appended.
        """
        naive_label, fast_label = labels
        if naive_label == fast_label:
            raise ValueError(f"labels must differ, got {labels}")

        columns = {}
        for label, func in ((naive_label, func_a), (fast_label, func_b)):
            columns[label] = Benchmark.time_function(func, *args, num_runs=num_runs, **kwargs)
        df = pd.DataFrame(columns).reindex(list(STAT_ROWS))

        mean_a, mean_b = df.loc["mean", naive_label], df.loc["mean", fast_label]
        if mean_b > 0:
            df.loc["speedup"] = [mean_a / mean_b, 1.0]

        if memory:
            df.loc["peak_kb"] = [
                Benchmark.memory_profile(func_a, *args, **kwargs)["peak_kb"],
                Benchmark.memory_profile(func_b, *args, **kwargs)["peak_kb"],
            ]

        logger.debug("%s vs %s: mean %.3g s vs %.3g s", naive_label, fast_label, mean_a, mean_b)
        return df

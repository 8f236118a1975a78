"""
perfnotes - Readable and Efficient Numerical Python

Companion code for a lecture note on writing numerical code that is both
readable and fast.  One reusable component and a set of measured
demonstrations:

    memoize     - Memoizing function wrapper: caches a pure function's output
                  keyed by its (hashable) input, never caches failures, and
                  can be cleared with ``forget``.  Optional thread-safe
                  variant with a single-flight guarantee.

    benchmarks  - Timing / memory harness (min, median, mean, max over
                  repeated runs; side-by-side comparison with speedup).

    demos       - Naive vs optimized pairs: vectorization, pre-allocation,
                  memoization, compiled-code offload, batched matrix solves.

    suite       - Runs the enabled demos, writes CSV tables, plots and a
                  Markdown report.

    config      - YAML-backed benchmark configuration.
"""

from .errors import ConfigError, PerfNotesError, UnderlyingComputationFailed
from .memoize import (
    CacheInfo,
    Memoized,
    ThreadSafeMemoized,
    drop_cache,
    forget,
    has_cache,
    is_memoized,
    memoize,
)

__version__ = "0.1.0"

__all__ = [
    "CacheInfo",
    "ConfigError",
    "Memoized",
    "PerfNotesError",
    "ThreadSafeMemoized",
    "UnderlyingComputationFailed",
    "drop_cache",
    "forget",
    "has_cache",
    "is_memoized",
    "memoize",
]

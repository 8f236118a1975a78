"""
===============================================================================
PERFNOTES - Demonstration Pair Test Suite
===============================================================================
Every naive/optimized pair must compute the same thing.  A few tests also
PROVE the headline effects with deliberately generous margins: vectorized
sqrt beats the interpreter loop, and memoization wins on a highly repetitive
stream of expensive calls while losing on a cheap function is allowed.
===============================================================================
"""

import time

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose

from perfnotes import memoize
from perfnotes.demos import (
    Demos,
    cheap_pure,
    expensive_pure,
    fill_growing_array,
    fill_growing_list,
    fill_preallocated,
    fill_vectorized,
    make_input_stream,
    make_linear_system,
    pairwise_distances_compiled,
    pairwise_distances_loop,
    run_stream,
    running_sum_compiled,
    running_sum_loop,
    solve_batched,
    solve_lu_reuse,
    solve_rowwise,
    solve_via_inverse,
    sqrt_loop,
    sqrt_vectorized,
)


# =============================================================================
# Helper: timing context manager
# =============================================================================

class Timer:
    """Simple context manager for measuring wall-clock time."""

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self.start


# =============================================================================
# Test: Equivalence of each pair
# =============================================================================

class TestPairsAgree:

    def test_sqrt(self):
        values = np.random.default_rng(0).uniform(0, 50, size=1000)
        assert_allclose(sqrt_loop(values), sqrt_vectorized(values))

    def test_fill_variants(self):
        n = 500
        expected = fill_vectorized(n)
        assert_allclose(fill_growing_list(n), expected)
        assert_allclose(fill_growing_array(n), expected)
        assert_allclose(fill_preallocated(n), expected)
        assert fill_preallocated(n).dtype == np.float64

    def test_fill_empty(self):
        assert fill_preallocated(0).shape == (0,)
        assert fill_growing_array(0).shape == (0,)

    def test_running_sum(self):
        values = np.random.default_rng(1).standard_normal(2000)
        assert_allclose(running_sum_loop(values), running_sum_compiled(values), atol=1e-10)

    def test_pairwise_distances(self):
        points = np.random.default_rng(2).standard_normal((40, 3))
        d = pairwise_distances_loop(points)
        assert_allclose(d, pairwise_distances_compiled(points), atol=1e-12)
        assert_allclose(np.diag(d), 0.0)
        assert_allclose(d, d.T)

    def test_solvers(self):
        A, B = make_linear_system(30, 12, seed=3)
        X = solve_batched(A, B)
        assert_allclose(A @ X, B, atol=1e-10)
        assert_allclose(solve_rowwise(A, B), X, atol=1e-10)
        assert_allclose(solve_lu_reuse(A, B), X, atol=1e-10)
        assert_allclose(solve_via_inverse(A, B), X, atol=1e-8)


# =============================================================================
# Test: Memoization demo helpers
# =============================================================================

class TestMemoStream:

    def test_stream_covers_every_distinct_value(self):
        stream = make_input_stream(200, 15, seed=4)
        assert len(stream) == 200
        assert set(stream) == set(range(15))
        assert all(isinstance(x, int) for x in stream)

    def test_stream_is_reproducible(self):
        assert make_input_stream(50, 5, seed=9) == make_input_stream(50, 5, seed=9)

    def test_stream_rejects_too_many_distinct(self):
        with pytest.raises(ValueError):
            make_input_stream(3, 5)

    def test_empty_stream_rejected(self):
        with pytest.raises(ValueError, match="n_calls"):
            make_input_stream(0, 0)

    def test_memoization_scenario_rejects_empty_stream(self):
        with pytest.raises(ValueError):
            Demos.memoization(n_calls=0, n_distinct=0, work=10, num_runs=1)

    def test_memoized_stream_matches_and_counts(self):
        stream = make_input_stream(300, 10, seed=5)
        m = memoize(lambda x: expensive_pure(x, 200))
        assert run_stream(m, stream) == [expensive_pure(x, 200) for x in stream]
        info = m.cache_info()
        assert info.misses == 10
        assert info.hits == 290

    def test_cheap_pure(self):
        assert cheap_pure(7) == 49


# =============================================================================
# Test: Headline effects (generous margins)
# =============================================================================

class TestHeadlineEffects:

    def test_vectorized_sqrt_faster_than_loop(self):
        values = np.random.default_rng(6).uniform(0, 100, size=200_000)
        sqrt_loop(values[:10])
        sqrt_vectorized(values[:10])

        with Timer() as t_loop:
            sqrt_loop(values)
        with Timer() as t_vec:
            sqrt_vectorized(values)

        speedup = t_loop.elapsed / max(t_vec.elapsed, 1e-12)
        assert speedup >= 5.0, (
            f"Vectorized only {speedup:.1f}x faster than loop "
            f"(loop={t_loop.elapsed*1e3:.1f}ms, vec={t_vec.elapsed*1e3:.1f}ms)"
        )

    def test_memoization_wins_on_repetitive_expensive_stream(self):
        # 10 distinct inputs over 400 calls -> 40x fewer evaluations
        stream = make_input_stream(400, 10, seed=7)

        def expensive(x):
            return expensive_pure(x, 5_000)

        with Timer() as t_plain:
            plain = run_stream(expensive, stream)
        with Timer() as t_memo:
            memo = run_stream(memoize(expensive), stream)

        assert plain == memo
        speedup = t_plain.elapsed / max(t_memo.elapsed, 1e-12)
        assert speedup >= 5.0, f"Memoization only {speedup:.1f}x faster"


# =============================================================================
# Test: Timed scenarios return comparison frames
# =============================================================================

class TestScenarios:

    def test_vectorization_frame(self):
        df = Demos.vectorization(n=2_000, num_runs=2, seed=0)
        assert list(df.columns) == ["loop_sqrt", "numpy_sqrt"]
        assert "speedup" in df.index

    def test_preallocation_frame(self):
        df = Demos.preallocation(n=500, num_runs=2)
        assert isinstance(df.index, pd.MultiIndex)
        assert set(df.index.get_level_values(0)) == {"prealloc", "grow_array", "vectorized"}
        assert "peak_kb" in df.loc["prealloc"].index
        assert "peak_kb" not in df.loc["vectorized"].index

    def test_memoization_frame(self):
        df = Demos.memoization(n_calls=50, n_distinct=5, work=100, num_runs=1, seed=0)
        assert set(df.index.get_level_values(0)) == {"expensive", "cheap"}
        assert list(df.columns) == ["plain", "memoized"]

    def test_offload_frame(self):
        df = Demos.offload(n=400, num_runs=2, seed=0)
        assert set(df.index.get_level_values(0)) == {"cumsum", "distance"}

    def test_matrix_solve_frame(self):
        df = Demos.matrix_solve(dim=10, n_rhs=5, num_runs=2, seed=0)
        assert set(df.index.get_level_values(0)) == {"batched", "lu_reuse", "inverse"}

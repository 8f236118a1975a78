"""
memoize.py - Memoizing Function Wrapper

Memoization trades memory for time: the output of a deterministic function is
stored under its input, and every later call with the same input returns the
stored value instead of recomputing it.

    first call  f'(x)  ->  miss: run f(x), store it, return it
    later calls f'(x)  ->  hit : return the stored value, f is not called

When it pays off
----------------
The cache grows by one entry per *distinct* input, so its memory cost is
O(number of distinct inputs seen).  The time saved per hit is cost(f); the
time spent per call is one hash + one dict lookup (+ one insert on a miss).
Memoization therefore only wins when

    cost(f)  >>  cost(hash(key) + lookup + insert)

and the input stream repeats itself.  Wrapping a cheap function (``x * x``)
makes it *slower*; see ``Demos.memoization`` for both measurements.

Preconditions
-------------
* **Purity.**  The wrapped function must be a pure function of its
  arguments.  On a hit the function is not executed at all, so any side
  effect it has (printing, logging, counting, I/O) silently disappears.
* **Hashable inputs.**  Arguments are used as a dict key.  Passing an
  unhashable argument (list, dict, ndarray) raises ``TypeError``.

Failures are never cached: if ``f`` raises, the wrapper raises
:class:`~perfnotes.errors.UnderlyingComputationFailed` and no entry is
written, so the next call with that input runs ``f`` again.

Concurrency
-----------
:class:`Memoized` is single-threaded and must be externally synchronised.
:class:`ThreadSafeMemoized` (``memoize(f, thread_safe=True)``) adds a
single-flight guarantee: concurrent calls with the same input evaluate ``f``
at most once, while calls with different inputs run independently.
"""

import functools
import logging
import threading
from collections import namedtuple
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from .errors import UnderlyingComputationFailed

logger = logging.getLogger(__name__)

CacheInfo = namedtuple("CacheInfo", ["hits", "misses", "currsize"])

# Separates positional arguments from keyword items inside a cache key.
_KWD_MARK = object()


class Memoized:
    """
    Cache-backed wrapper around a pure function.

    Not safe for concurrent use; see :class:`ThreadSafeMemoized`.

    Parameters
    ----------
    func : callable
        The function to memoize.  Must be pure and take hashable arguments.
    """

    def __init__(self, func: Callable[..., Any]):
        if not callable(func):
            raise TypeError(f"memoize() expects a callable, got {type(func).__name__}")
        # Before our own attributes: update_wrapper copies func.__dict__.
        functools.update_wrapper(self, func)
        self.func = func
        self._name = getattr(func, "__qualname__", None) or repr(func)
        self._cache: Dict[Hashable, Any] = {}
        self._hits = 0
        self._misses = 0

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name} currsize={len(self._cache)}>"

    def __get__(self, obj, objtype=None):
        """Bind as a method: the instance becomes the first key component."""
        if obj is None:
            return self
        return functools.partial(self, obj)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------
    def _make_key(self, args: Tuple, kwargs: Dict[str, Any]) -> Hashable:
        """Build the cache key; keyword order does not matter."""
        key = args
        if kwargs:
            key = args + (_KWD_MARK,) + tuple(sorted(kwargs.items()))
        try:
            hash(key)
        except TypeError as exc:
            raise TypeError(
                f"{self._name}: memoized arguments must be hashable ({exc})"
            ) from None
        return key

    # ------------------------------------------------------------------
    # Call path
    # ------------------------------------------------------------------
    def _compute(self, key: Hashable, args: Tuple, kwargs: Dict[str, Any]) -> Any:
        try:
            return self.func(*args, **kwargs)
        except Exception as exc:
            logger.debug("%s failed for %r, not cached: %s", self._name, key, exc)
            raise UnderlyingComputationFailed(self._name, key, exc) from exc

    def __call__(self, *args, **kwargs) -> Any:
        key = self._make_key(args, kwargs)
        try:
            value = self._cache[key]
        except KeyError:
            pass
        else:
            self._hits += 1
            logger.debug("%s cache hit for %r", self._name, key)
            return value

        self._misses += 1
        logger.debug("%s cache miss for %r", self._name, key)
        value = self._compute(key, args, kwargs)
        self._cache[key] = value
        return value

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------
    def forget(self) -> None:
        """Discard every entry and reset the hit/miss counters."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0
        logger.debug("%s cache cleared", self._name)

    def cache_info(self) -> CacheInfo:
        return CacheInfo(self._hits, self._misses, len(self._cache))

    def has(self, *args, **kwargs) -> bool:
        """True if these arguments already have a cached result."""
        return self._make_key(args, kwargs) in self._cache

    def drop(self, *args, **kwargs) -> bool:
        """Remove the entry for these arguments; returns whether one existed."""
        key = self._make_key(args, kwargs)
        if key in self._cache:
            del self._cache[key]
            return True
        return False

    def __len__(self) -> int:
        return len(self._cache)


class ThreadSafeMemoized(Memoized):
    """
    Memoized wrapper with a single-flight guarantee.

    A lock guards the cache table.  The first thread to miss on a key becomes
    its *leader* and computes the value outside the lock; other threads asking
    for the same key wait on a per-key event and then read the stored result.
    If the leader fails nothing is stored, and each waiting thread retries as
    a new leader.
    """

    def __init__(self, func: Callable[..., Any]):
        super().__init__(func)
        self._lock = threading.Lock()
        self._in_flight: Dict[Hashable, threading.Event] = {}

    def __call__(self, *args, **kwargs) -> Any:
        key = self._make_key(args, kwargs)
        while True:
            with self._lock:
                if key in self._cache:
                    self._hits += 1
                    logger.debug("%s cache hit for %r", self._name, key)
                    return self._cache[key]
                event = self._in_flight.get(key)
                if event is None:
                    event = threading.Event()
                    self._in_flight[key] = event
                    self._misses += 1
                    logger.debug("%s cache miss for %r", self._name, key)
                    break
            event.wait()

        try:
            value = self._compute(key, args, kwargs)
        except BaseException:
            with self._lock:
                del self._in_flight[key]
            event.set()
            raise

        with self._lock:
            self._cache[key] = value
            del self._in_flight[key]
        event.set()
        return value

    def forget(self) -> None:
        with self._lock:
            super().forget()

    def cache_info(self) -> CacheInfo:
        with self._lock:
            return super().cache_info()

    def has(self, *args, **kwargs) -> bool:
        with self._lock:
            return super().has(*args, **kwargs)

    def drop(self, *args, **kwargs) -> bool:
        with self._lock:
            return super().drop(*args, **kwargs)


# ---------------------------------------------------------------------------
# Functional interface
# ---------------------------------------------------------------------------

def memoize(func: Optional[Callable[..., Any]] = None, *, thread_safe: bool = False):
    """
    Wrap *func* with a fresh, empty cache.

    Usable directly (``memoize(f)``) or as a decorator, with or without
    arguments::

        @memoize
        def slow_square(x): ...

        @memoize(thread_safe=True)
        def shared_lookup(key): ...

    Every call builds an independent wrapper; wrapping the same function twice
    gives two caches.
    """
    cls = ThreadSafeMemoized if thread_safe else Memoized
    if func is None:
        return cls
    return cls(func)


def is_memoized(obj: Any) -> bool:
    return isinstance(obj, Memoized)


def _require_memoized(obj: Any, op: str) -> Memoized:
    if not isinstance(obj, Memoized):
        raise TypeError(f"{op}() expects a memoized function, got {obj!r}")
    return obj


def forget(f: Memoized) -> None:
    """Clear every entry of *f*'s cache.  Clearing an empty cache is a no-op."""
    _require_memoized(f, "forget").forget()


def has_cache(f: Memoized, *args, **kwargs) -> bool:
    """Whether calling ``f(*args, **kwargs)`` would be a cache hit."""
    return _require_memoized(f, "has_cache").has(*args, **kwargs)


def drop_cache(f: Memoized, *args, **kwargs) -> bool:
    """Drop the single cached entry for these arguments, if any."""
    return _require_memoized(f, "drop_cache").drop(*args, **kwargs)

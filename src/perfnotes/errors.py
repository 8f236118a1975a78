"""
errors.py - Exception hierarchy for perfnotes.
"""

from typing import Any, Hashable


class PerfNotesError(Exception):
    """Base class for every error raised by perfnotes itself."""


class UnderlyingComputationFailed(PerfNotesError):
    """
    Raised when a memoized function fails for a given input.

    The original exception is chained as ``__cause__`` and also exposed as
    :attr:`cause`.  A failed call never creates a cache entry, so calling
    again with the same input re-runs the function and raises again.
    """

    def __init__(self, func_name: str, key: Hashable, cause: BaseException):
        self.func_name = func_name
        self.key = key
        self.cause = cause
        super().__init__(
            f"{func_name} failed for input {key!r}: "
            f"{type(cause).__name__}: {cause}"
        )


class ConfigError(PerfNotesError):
    """Invalid or unreadable benchmark configuration."""

    def __init__(self, message: str, path: Any = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)

"""
config.py - Benchmark configuration

Settings live in a YAML file (``config/benchmark_config.yaml`` by default)
and are loaded into a :class:`BenchmarkConfig` dataclass.  Every key is
optional; anything omitted keeps the default below.

Example::

    output_dir: output/benchmarks
    seed: 42
    num_runs: 20
    vector_size: 1000000
    scenarios: [vectorization, memoization]
"""

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "benchmark_config.yaml"

SCENARIOS = (
    "vectorization",
    "preallocation",
    "memoization",
    "offload",
    "matrix_solve",
)

_SIZE_FIELDS = (
    "num_runs",
    "vector_size",
    "prealloc_size",
    "memo_calls",
    "memo_distinct",
    "memo_work",
    "offload_size",
    "solve_dim",
    "solve_rhs",
)


@dataclass
class BenchmarkConfig:
    """Sizes and switches for the demonstration suite."""

    output_dir: str = "benchmark_results"
    seed: int = 42
    num_runs: int = 20

    vector_size: int = 1_000_000     # elements for the sqrt demo
    prealloc_size: int = 100_000     # elements filled in the allocation demo
    memo_calls: int = 2_000          # calls in the memoization stream
    memo_distinct: int = 20          # distinct inputs in that stream
    memo_work: int = 20_000          # loop length inside the expensive function
    offload_size: int = 200_000      # running-sum length; pairwise demo uses sqrt of it
    solve_dim: int = 100             # A is solve_dim x solve_dim
    solve_rhs: int = 500             # number of right-hand sides

    scenarios: List[str] = field(default_factory=lambda: list(SCENARIOS))

    def validate(self) -> "BenchmarkConfig":
        for name in _SIZE_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.memo_distinct > self.memo_calls:
            raise ConfigError(
                f"memo_distinct ({self.memo_distinct}) cannot exceed "
                f"memo_calls ({self.memo_calls})"
            )
        unknown = [s for s in self.scenarios if s not in SCENARIOS]
        if unknown:
            raise ConfigError(
                f"unknown scenario(s) {unknown}; choose from {list(SCENARIOS)}"
            )
        if not self.scenarios:
            raise ConfigError("at least one scenario must be enabled")
        return self

    def quick(self) -> "BenchmarkConfig":
        """Reduced-size copy for smoke runs (``--quick``)."""
        return replace(
            self,
            num_runs=min(self.num_runs, 3),
            vector_size=min(self.vector_size, 50_000),
            prealloc_size=min(self.prealloc_size, 10_000),
            memo_calls=min(self.memo_calls, 200),
            memo_distinct=min(self.memo_distinct, 10),
            memo_work=min(self.memo_work, 2_000),
            offload_size=min(self.offload_size, 10_000),
            solve_dim=min(self.solve_dim, 20),
            solve_rhs=min(self.solve_rhs, 50),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def config_from_dict(data: Dict[str, Any], path: Any = None) -> BenchmarkConfig:
    """Build and validate a config from a plain mapping."""
    if not isinstance(data, dict):
        raise ConfigError(
            f"top-level YAML must be a mapping, got {type(data).__name__}", path
        )
    known = {f.name for f in fields(BenchmarkConfig)}
    unknown = sorted(map(str, set(data) - known))
    if unknown:
        raise ConfigError(f"unknown key(s): {', '.join(unknown)}", path)

    data = dict(data)
    if "scenarios" in data:
        scenarios = data["scenarios"]
        if isinstance(scenarios, str):
            scenarios = [scenarios]
        if not isinstance(scenarios, list):
            raise ConfigError("scenarios must be a list of names", path)
        data["scenarios"] = list(scenarios)

    try:
        return BenchmarkConfig(**data).validate()
    except ConfigError as exc:
        if path is not None and exc.path is None:
            raise ConfigError(str(exc), path) from None
        raise


def load_config(config_path: Optional[str] = None) -> BenchmarkConfig:
    """
    Load benchmark configuration from a YAML file.

    Args:
        config_path: Path to YAML config.  Defaults to
            ``config/benchmark_config.yaml``; if that file does not exist the
            built-in defaults are used.

    Returns:
        A validated :class:`BenchmarkConfig`.
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            logger.info("No config file found, using defaults")
            return BenchmarkConfig()
        config_path = str(DEFAULT_CONFIG_PATH)

    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read config: {exc.strerror}", config_path) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}", config_path) from exc

    if data is None:
        return BenchmarkConfig()
    return config_from_dict(data, config_path)

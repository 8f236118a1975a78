"""
===============================================================================
PERFNOTES - Configuration Test Suite
===============================================================================
Tests for the YAML configuration layer: defaults and the shipped file,
partial files falling back to defaults, rejection of unknown keys and bad
sizes, error messages that carry the offending path, and the reduced-size
``quick`` copy used for smoke runs.
===============================================================================
"""

from pathlib import Path

import pytest
import yaml

from perfnotes.config import (
    SCENARIOS,
    BenchmarkConfig,
    config_from_dict,
    load_config,
)
from perfnotes.errors import ConfigError

SHIPPED_CONFIG = Path(__file__).resolve().parent.parent / "config" / "benchmark_config.yaml"


# =============================================================================
# Helper: write a mapping as YAML
# =============================================================================

def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return str(path)


# =============================================================================
# Test: Defaults and the shipped config file
# =============================================================================

class TestDefaults:

    def test_defaults_are_valid(self):
        config = BenchmarkConfig().validate()
        assert config.scenarios == list(SCENARIOS)
        assert config.num_runs > 0

    def test_shipped_config_file_loads(self):
        config = load_config(str(SHIPPED_CONFIG))
        assert config.seed == 42
        assert set(config.scenarios) == set(SCENARIOS)

    def test_to_dict_round_trips(self):
        config = BenchmarkConfig(num_runs=7)
        assert config_from_dict(config.to_dict()) == config


# =============================================================================
# Test: Loading YAML files
# =============================================================================

class TestLoadConfig:

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = write_yaml(tmp_path / "c.yaml", {"num_runs": 3, "scenarios": "memoization"})
        config = load_config(path)
        assert config.num_runs == 3
        assert config.scenarios == ["memoization"]
        assert config.vector_size == BenchmarkConfig().vector_size

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == BenchmarkConfig()

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(str(path))

    def test_invalid_yaml_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("num_runs: [1, 2\n")
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(str(path))

    def test_missing_file_rejected(self, tmp_path):
        with pytest.raises(ConfigError) as excinfo:
            load_config(str(tmp_path / "nope.yaml"))
        assert excinfo.value.path == str(tmp_path / "nope.yaml")

    def test_error_carries_path(self, tmp_path):
        path = write_yaml(tmp_path / "c.yaml", {"num_runs": 0})
        with pytest.raises(ConfigError) as excinfo:
            load_config(path)
        assert excinfo.value.path == path
        assert str(excinfo.value).startswith(path)


# =============================================================================
# Test: Validation
# =============================================================================

class TestValidation:

    def test_unknown_key_rejected(self, tmp_path):
        path = write_yaml(tmp_path / "c.yaml", {"num_runz": 3})
        with pytest.raises(ConfigError, match="num_runz"):
            load_config(path)

    def test_mixed_type_unknown_keys_rejected(self, tmp_path):
        # YAML parses the bare 1 as an int key next to the string key
        path = tmp_path / "mixed.yaml"
        path.write_text("1: x\nfoo: y\n")
        with pytest.raises(ConfigError, match="unknown key") as excinfo:
            load_config(str(path))
        assert "1" in str(excinfo.value)
        assert "foo" in str(excinfo.value)

    def test_unknown_scenario_rejected(self):
        with pytest.raises(ConfigError, match="unknown scenario"):
            config_from_dict({"scenarios": ["vectorization", "gpu"]})

    @pytest.mark.parametrize("key,value", [
        ("num_runs", 0),
        ("vector_size", -1),
        ("solve_dim", 2.5),
        ("memo_calls", True),
    ])
    def test_non_positive_sizes_rejected(self, key, value):
        with pytest.raises(ConfigError, match=key):
            config_from_dict({key: value})

    def test_memo_distinct_bounded_by_calls(self):
        with pytest.raises(ConfigError, match="memo_distinct"):
            config_from_dict({"memo_calls": 5, "memo_distinct": 10})

    def test_empty_scenario_list_rejected(self):
        with pytest.raises(ConfigError):
            config_from_dict({"scenarios": []})

    def test_scenarios_must_be_a_list(self):
        with pytest.raises(ConfigError, match="scenarios"):
            config_from_dict({"scenarios": {"vectorization": True}})


# =============================================================================
# Test: Quick mode
# =============================================================================

class TestQuick:

    def test_quick_shrinks_sizes(self):
        full = BenchmarkConfig()
        quick = full.quick().validate()
        assert quick.vector_size < full.vector_size
        assert quick.num_runs <= 3
        assert quick.scenarios == full.scenarios
        assert full.vector_size == BenchmarkConfig().vector_size

    def test_quick_never_grows_small_sizes(self):
        small = BenchmarkConfig(num_runs=1, solve_dim=4)
        quick = small.quick()
        assert quick.num_runs == 1
        assert quick.solve_dim == 4

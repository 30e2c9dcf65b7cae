"""
配置加载测试
"""
import pytest

from cube_engine import ConfigError, SolveConfig, load_config
from cube_engine.core.config import time_budget_ms


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(str(tmp_path / "missing.yaml"))
    assert config == SolveConfig()


def test_load_solver_section(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("solver:\n  max_time_ms: 500\n  allow_fallback: false\n", encoding="utf-8")
    config = load_config(str(path))
    assert config.max_time_ms == 500
    assert config.allow_fallback is False
    assert config.max_depth is None


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == SolveConfig()


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("solver:\n  max_time: 500\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_malformed_yaml_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("solver: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


@pytest.mark.parametrize("size, budget", [(2, 1000), (3, 2000), (4, 10000), (5, 30000), (7, 120000), (20, 120000)])
def test_time_budgets(size, budget):
    assert time_budget_ms(size) == budget
    assert SolveConfig().resolved(size).max_time_ms == budget


def test_resolved_keeps_explicit_values():
    config = SolveConfig(max_time_ms=50, max_depth=9).resolved(3)
    assert config.max_time_ms == 50
    assert config.max_depth == 9
    assert SolveConfig().resolved(2).max_depth == 11
    assert SolveConfig.for_size(3).max_depth == 24


@pytest.mark.parametrize("body", [
    "solver:\n  max_time_ms: fast\n",
    "solver:\n  max_time_ms: 1.5\n",
    "solver:\n  max_depth: -1\n",
    "solver:\n  max_nodes: true\n",
    "solver:\n  allow_fallback: 'no'\n",
    "solver:\n  allow_fallback: 0\n",
])
def test_bad_values_rejected(tmp_path, body):
    path = tmp_path / "config.yaml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_null_values_keep_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("solver:\n  max_time_ms: null\n  max_nodes: null\n  max_depth: 0\n", encoding="utf-8")
    config = load_config(str(path))
    assert config.max_time_ms is None
    assert config.max_nodes is None
    assert config.max_depth == 0

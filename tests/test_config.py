"""Tests for config file loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from toonify.config import CONFIG_FILENAME, load_config, load_config_from_dir
from toonify.contracts.analysis import ToonConfig
from toonify.contracts.common import ConfigError


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config(tmp_path: Path):
    path = _write(
        tmp_path / "cfg.yaml",
        "eligibility:\n  min_tabular_percent: 70\n  max_nested_depth: 2\n  min_uniformity_score: 0.9\n",
    )
    config = load_config(path)
    assert config.eligibility.min_tabular_percent == 70
    assert config.eligibility.max_nested_depth == 2
    assert config.eligibility.min_uniformity_score == 0.9


def test_partial_config_keeps_defaults(tmp_path: Path):
    config = load_config(_write(tmp_path / "cfg.yaml", "eligibility:\n  max_nested_depth: 6\n"))
    assert config.eligibility.max_nested_depth == 6
    assert config.eligibility.min_tabular_percent == 60


def test_empty_file_gives_defaults(tmp_path: Path):
    assert load_config(_write(tmp_path / "cfg.yaml", "")) == ToonConfig()


def test_bom_is_tolerated(tmp_path: Path):
    path = tmp_path / "cfg.yaml"
    path.write_bytes("\ufeffeligibility:\n  max_nested_depth: 3\n".encode("utf-8"))
    assert load_config(path).eligibility.max_nested_depth == 3


@pytest.mark.parametrize(
    "text",
    [
        "eligibility:\n  min_uniformity_score: 5\n",
        "- just\n- a list\n",
        "eligibility: [unclosed\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, text: str):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path / "cfg.yaml", text))


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yaml")


def test_load_from_dir(tmp_path: Path):
    assert load_config_from_dir(tmp_path) is None
    _write(tmp_path / CONFIG_FILENAME, "eligibility:\n  min_tabular_percent: 90\n")
    config = load_config_from_dir(tmp_path)
    assert config is not None
    assert config.eligibility.min_tabular_percent == 90

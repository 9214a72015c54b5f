"""Config loading: read ``toonify.yaml`` into a validated ``ToonConfig``.

Example file::

    eligibility:
      min_tabular_percent: 70
      max_nested_depth: 3
      min_uniformity_score: 0.9
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from toonify.contracts.analysis import ToonConfig
from toonify.contracts.common import ConfigError
from toonify.io.fileops import read_text_safe

CONFIG_FILENAME = "toonify.yaml"


def load_config(path: str | Path) -> ToonConfig:
    """Load config from a YAML file."""
    try:
        data = yaml.safe_load(read_text_safe(path)) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping")
    try:
        return ToonConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e


def load_config_from_dir(directory: str | Path) -> ToonConfig | None:
    """Try to load toonify.yaml from a directory. Returns None if not found."""
    path = Path(directory) / CONFIG_FILENAME
    if path.exists():
        return load_config(path)
    return None

"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers override earlier):

  1. ``.env`` file -- local operator defaults
  2. A YAML file (``config/config.yaml`` by default) -- per-deployment values
  3. Environment variables -- set at deploy time

The YAML file is optional; a missing file simply contributes nothing.
Keys in the YAML file use the same names as :class:`Settings` fields,
either flat or grouped one level deep::

    backend:
      base_url: https://app.example.com/api
      api_token: abc123
    notification_error_seconds: 8
"""

import os
from pathlib import Path
from typing import Any

import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError


def _flatten(data: dict[str, Any]) -> dict[str, Any]:
    """Flatten one level of grouping: ``{"backend": {"base_url": x}}`` -> ``backend_base_url``."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flat[f"{key}_{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat


def load_settings(path: str = "config/config.yaml") -> Settings:
    """Build :class:`Settings` from an optional YAML file plus the environment.

    Environment variables always win over YAML values: a YAML key is only
    passed through when no env var of the same (upper-cased) name is set.

    Raises
    ------
    ConfigurationError
        If the YAML file exists but is not a mapping.
    """
    config_path = Path(path)
    file_values: dict[str, Any] = {}

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        file_values = _flatten(raw)

    known = set(Settings.model_fields)
    overrides = {
        key: value
        for key, value in file_values.items()
        if key in known and key.upper() not in os.environ
    }
    return Settings(**overrides)

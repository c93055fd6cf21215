"""
Extractor configuration: YAML file, environment and CLI overrides.

Example ``extractor.yaml``::

    store:
      url: http://localhost:8383
      bucket: sensor-data
      api_token: secret
      timeout: 30
    query:
      start: 2025-01-01T00:00:00Z
      stop: 2025-01-01T01:00:00Z
      output_dir: img
"""

import os
from dataclasses import dataclass, fields
from typing import Optional

import yaml

from core.constants import (
    DEFAULT_BUCKET,
    DEFAULT_URL,
    IMAGE_DIR,
    PROGRESS_EVERY,
    TOKEN_ENV_VAR,
)
from core.errors import ConfigError

_SECTIONS = ("store", "query")


@dataclass
class ExtractorConfig:
    url: str = DEFAULT_URL
    bucket: str = DEFAULT_BUCKET
    api_token: Optional[str] = None
    timeout: Optional[float] = None
    start: str = ""               # empty = unbounded
    stop: str = ""
    output_dir: str = IMAGE_DIR
    progress_every: int = PROGRESS_EVERY

    def override(self, **values) -> "ExtractorConfig":
        """Apply non-None values (e.g. from CLI flags) in place."""
        known = {f.name for f in fields(self)}
        for key, val in values.items():
            if key not in known:
                raise ConfigError(f"Unknown config option: {key}")
            if val is not None:
                setattr(self, key, val)
        return self


def load_config(yaml_path: Optional[str] = None) -> ExtractorConfig:
    """
    Load configuration from *yaml_path* (optional).

    Both sections are flattened into one ``ExtractorConfig``. The API token
    falls back to the ``REDUCT_API_TOKEN`` environment variable.
    """
    config = ExtractorConfig()

    if yaml_path is not None:
        if not os.path.exists(yaml_path):
            raise ConfigError(f"Config file not found: {yaml_path}")
        try:
            with open(yaml_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {yaml_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{yaml_path}: top level must be a mapping")

        for section, values in data.items():
            if section not in _SECTIONS:
                raise ConfigError(f"{yaml_path}: unknown section '{section}'")
            if not isinstance(values, dict):
                raise ConfigError(f"{yaml_path}: section '{section}' must be a mapping")
            # YAML turns unquoted ISO timestamps into datetimes
            values = {k: _as_text(k, v) for k, v in values.items()}
            config.override(**values)

    if config.api_token is None:
        config.api_token = os.environ.get(TOKEN_ENV_VAR)
    return config


def _as_text(key, val):
    if key in ("start", "stop") and val is not None and not isinstance(val, str):
        return val.isoformat().replace("+00:00", "Z")
    return val

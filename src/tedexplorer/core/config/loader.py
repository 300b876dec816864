"""
Configuration loader.

Reads ``app.yaml`` into an AppConfig. String values may reference the
environment as ``${VAR}`` or ``${VAR:-default}``; an unset variable with
no default becomes an empty string.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import AppConfig

DEFAULT_APP_CONFIG = Path("configs/app.yaml")
CONFIG_ENV_VAR = "TEDEXPLORER_CONFIG"

_ENV_REF = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<default>[^}]*))?\}")


class ConfigError(Exception):
    """Configuration file missing, unreadable or invalid."""

    def __init__(self, message: str, path: Path | None = None, details: str | None = None):
        self.path = path
        self.details = details
        super().__init__(message)


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Explicit path, else ``$TEDEXPLORER_CONFIG``, else ``configs/app.yaml``."""
    if path is not None:
        return Path(path)
    return Path(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_APP_CONFIG)


def _read_yaml(path: Path) -> dict[str, Any]:
    """Parse ``path`` and return its top-level mapping.

    Raises:
        ConfigError: If the file is missing, unreadable, not YAML, or not a mapping
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}", path=path) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", path=path, details=str(e)) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", path=path, details=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Top level of {path} must be a mapping, got {type(data).__name__}",
            path=path,
        )
    return data


def _interpolate(value: Any) -> Any:
    """Substitute environment references in every string of a YAML tree."""
    if isinstance(value, str):
        return _ENV_REF.sub(
            lambda m: os.environ.get(m.group("name"), m.group("default") or ""),
            value,
        )
    if isinstance(value, dict):
        return {key: _interpolate(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_interpolate(item) for item in value]
    return value


def load_app_config(
    path: Path | str | None = None,
    expand_env: bool = True,
) -> AppConfig:
    """Load application configuration.

    A missing file is not an error: the defaults are returned.

    Args:
        path: Path to app.yaml (default: $TEDEXPLORER_CONFIG or configs/app.yaml)
        expand_env: Substitute ``${VAR}`` references

    Raises:
        ConfigError: If the file exists but cannot be used
    """
    path = resolve_config_path(path)
    if not path.exists():
        return AppConfig()

    data = _read_yaml(path)
    if expand_env:
        data = _interpolate(data)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid app configuration in {path}",
            path=path,
            details=str(e),
        ) from e


def validate_app_config_file(path: Path | str) -> list[str]:
    """Problems found in a configuration file, one message per problem.

    Unlike ``load_app_config``, a missing file is reported.
    """
    try:
        data = _read_yaml(Path(path))
    except ConfigError as e:
        return [str(e)]

    try:
        AppConfig.model_validate(_interpolate(data))
    except ValidationError as e:
        return [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
    return []

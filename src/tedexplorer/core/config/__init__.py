"""Configuration loading and validation."""

from .models import (
    AppConfig,
    Country,
    CpvCode,
    DatabaseConfig,
    EndpointConfig,
    LoggingConfig,
    SearchConfig,
)
from .loader import ConfigError, load_app_config, validate_app_config_file

__all__ = [
    # Config models
    "AppConfig",
    "EndpointConfig",
    "SearchConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "CpvCode",
    "Country",
    # Loaders
    "ConfigError",
    "load_app_config",
    "validate_app_config_file",
]

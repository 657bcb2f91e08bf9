"""Wilson configuration.

This module provides the public API for Wilson configuration management,
including loading, validation, and typed access to configuration values.

Example:
    >>> from wilson.config import Config
    >>> config = Config.load()
    >>> config.supervisor.health_interval
    30.0
"""

from wilson.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._defaults import DEFAULT_CONFIG
from ._discovery import discover_sources, get_user_config_path
from ._load import safe_load_config
from ._loader import deep_merge, parse_env_vars, read_toml_file, set_nested_key
from ._models import (
    Config,
    ConfigSource,
    ConfigSourceName,
    LogFormat,
    LoggingConfig,
    LogLevel,
    SupervisorSettings,
    UpdatesConfig,
)

__all__ = [
    "DEFAULT_CONFIG",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigSource",
    "ConfigSourceName",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "SupervisorSettings",
    "UpdatesConfig",
    "deep_merge",
    "discover_sources",
    "get_user_config_path",
    "parse_env_vars",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]

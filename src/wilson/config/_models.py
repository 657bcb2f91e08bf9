"""Configuration models.

This module provides the Pydantic models for each configuration section and
the Config container that merges them from all sources.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from wilson.exceptions import ConfigValidationError
from wilson.utils import get_github_token_file, get_supervisor_log_file

from ._defaults import DEFAULT_CONFIG
from ._loader import deep_merge, parse_env_vars, read_toml_file


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class ConfigSourceName(StrEnum):
    """Configuration source names in precedence order.

    Values are ordered from highest precedence (EXPLICIT) to lowest (DEFAULT).
    """

    EXPLICIT = "explicit"
    ENV = "env"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """Represents a configuration source.

    Attributes:
        name: The source type identifier.
        path: Path to the config file, or None for non-file sources.
        exists: Whether the source exists (file exists, or values are present).
        values: Configuration values from this source.
    """

    name: ConfigSourceName
    path: Path | None
    exists: bool
    values: dict[str, Any]


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to the supervisor log file (empty uses the default).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""

    def resolved_file(self) -> Path:
        """Return the configured log file, or the default supervisor log."""
        return Path(self.file).expanduser() if self.file else get_supervisor_log_file()


class SupervisorSettings(BaseModel):
    """Supervisor timing configuration section. All values are seconds."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    health_interval: float = Field(default=30.0, gt=0)
    update_interval: float = Field(default=60.0, gt=0)
    probe_timeout: float = Field(default=3.0, gt=0)
    start_timeout: float = Field(default=30.0, gt=0)
    restart_timeout: float = Field(default=30.0, gt=0)
    stop_timeout: float = Field(default=5.0, gt=0)
    restart_backoff: float = Field(default=3.0, ge=0)
    shutdown_timeout: float = Field(default=30.0, gt=0)


class UpdatesConfig(BaseModel):
    """Release lookup and install configuration section.

    Attributes:
        api_url: Base URL of the GitHub API.
        lookup_timeout: Seconds allowed for a release lookup.
        install_timeout: Seconds allowed for an install script run.
        token_file: File holding a GitHub token (empty uses the default).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    api_url: str = "https://api.github.com"
    lookup_timeout: float = Field(default=10.0, gt=0)
    install_timeout: float = Field(default=120.0, gt=0)
    token_file: str = ""

    def resolved_token_file(self) -> Path:
        """Return the configured token file, or the default location."""
        if self.token_file:
            return Path(self.token_file).expanduser()
        return get_github_token_file()


def _to_validation_error(
    error: ValidationError, source: str | None
) -> ConfigValidationError:
    first = error.errors()[0]
    key = ".".join(str(part) for part in first["loc"])
    msg = f"Invalid configuration value for '{key}': {first['msg']}"
    if source:
        msg = f"{msg} (in {source})"
    return ConfigValidationError(
        msg,
        key=key,
        value=first.get("input"),
        expected=first["msg"],
        source=source,
    )


class Config(BaseModel):
    """Configuration container with typed access.

    Use the factory methods rather than the constructor: they merge the
    built-in defaults underneath the given values.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    supervisor: SupervisorSettings = Field(default_factory=SupervisorSettings)
    updates: UpdatesConfig = Field(default_factory=UpdatesConfig)

    _data: dict[str, Any] = PrivateAttr(default_factory=dict)
    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())

    @classmethod
    def _build(
        cls,
        merged: dict[str, Any],
        sources: tuple[ConfigSource, ...],
        *,
        source_label: str | None = None,
    ) -> Self:
        try:
            config = cls.model_validate(merged)
        except ValidationError as e:
            raise _to_validation_error(e, source_label) from e
        config._data = merged
        config._sources = sources
        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Raises:
            ConfigValidationError: If a value fails validation.
        """
        return cls._build(deep_merge(DEFAULT_CONFIG, data), ())

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a single TOML file merged over the defaults.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If a value fails validation.
        """
        data = read_toml_file(path)
        source = ConfigSource(
            name=ConfigSourceName.EXPLICIT, path=path, exists=True, values=data
        )
        return cls._build(
            deep_merge(DEFAULT_CONFIG, data), (source,), source_label=str(path)
        )

    @classmethod
    def load(
        cls,
        *,
        config_path: Path | None = None,
        include_env: bool = True,
    ) -> Self:
        """Load merged configuration from all sources.

        Merges in precedence order: defaults -> user file -> environment ->
        explicit file.

        Args:
            config_path: Explicit config file (highest precedence).
            include_env: Include ``WILSON_*`` environment variables.

        Returns:
            Merged configuration object.

        Raises:
            FileNotFoundError: If the explicit config file does not exist.
            ConfigLoadError: If a config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        # Deferred import to avoid circular dependency
        from wilson.config._discovery import discover_sources  # noqa: PLC0415

        sources = discover_sources(config_path=config_path, include_env=include_env)

        merged: dict[str, Any] = {}
        loaded_sources: list[ConfigSource] = []

        # Sources are discovered highest-to-lowest, so reverse for merging
        for source in reversed(sources):
            values: dict[str, Any] = {}
            if source.name == ConfigSourceName.DEFAULT:
                values = source.values
            elif source.name == ConfigSourceName.ENV:
                values = parse_env_vars()
            elif source.path is not None and source.exists:
                values = read_toml_file(source.path)
            elif source.name == ConfigSourceName.EXPLICIT and source.path is not None:
                msg = f"Config file not found: {source.path}"
                raise FileNotFoundError(msg)

            loaded_sources.append(
                ConfigSource(
                    name=source.name,
                    path=source.path,
                    exists=source.exists,
                    values=values,
                )
            )
            if values:
                merged = deep_merge(merged, values)

        return cls._build(merged, tuple(reversed(loaded_sources)))

    @property
    def sources(self) -> list[ConfigSource]:
        """Return the sources that contributed to this configuration."""
        return list(self._sources)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Examples:
            >>> config.get("supervisor.health_interval")
            30.0
            >>> config.get("nonexistent", "fallback")
            'fallback'
        """
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

"""Config source discovery."""

from pathlib import Path

from wilson.utils import get_user_config_file

from ._defaults import DEFAULT_CONFIG
from ._models import ConfigSource, ConfigSourceName


def get_user_config_path() -> Path:
    r"""Get platform-specific user config file path.

    - Linux: ``~/.config/wilson/config.toml``
    - macOS: ``~/Library/Application Support/wilson/config.toml``
    - Windows: ``%APPDATA%\wilson\config.toml``

    The path is returned regardless of whether the file exists.
    """
    return get_user_config_file()


def discover_sources(
    *,
    config_path: Path | None = None,
    include_env: bool = True,
) -> list[ConfigSource]:
    """Discover all configuration sources.

    Values are not loaded here except for the defaults; ``Config.load``
    reads each source.

    Args:
        config_path: Explicit config file passed with ``--config``.
        include_env: Include the environment as a source.

    Returns:
        Sources in highest-to-lowest precedence order.
    """
    sources: list[ConfigSource] = []

    if config_path is not None:
        sources.append(
            ConfigSource(
                name=ConfigSourceName.EXPLICIT,
                path=config_path,
                exists=config_path.is_file(),
                values={},
            )
        )

    if include_env:
        sources.append(
            ConfigSource(name=ConfigSourceName.ENV, path=None, exists=True, values={})
        )

    user_path = get_user_config_path()
    sources.append(
        ConfigSource(
            name=ConfigSourceName.USER,
            path=user_path,
            exists=user_path.is_file(),
            values={},
        )
    )

    sources.append(
        ConfigSource(
            name=ConfigSourceName.DEFAULT,
            path=None,
            exists=True,
            values=DEFAULT_CONFIG,
        )
    )
    return sources

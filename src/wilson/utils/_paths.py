from pathlib import Path

import platformdirs

APP_NAME = "wilson"


def get_home_dir() -> Path:
    """Get the home directory used to resolve service install locations."""
    return Path.home()


def get_config_dir(name: str = APP_NAME) -> Path:
    """Get the platform config directory for Wilson or a managed service.

    Args:
        name: Application name, defaults to Wilson itself.

    Returns:
        Path to the config directory (not created).
    """
    return platformdirs.user_config_path(name)


def get_user_config_file() -> Path:
    """Get the path to Wilson's user config file (config.toml)."""
    return get_config_dir() / "config.toml"


def get_github_token_file() -> Path:
    """Get the default path of the GitHub token used for release lookups."""
    return get_config_dir() / "github-token"


def get_log_dir() -> Path:
    """Get the platform log directory for Wilson."""
    return platformdirs.user_log_path(APP_NAME)


def get_supervisor_log_file() -> Path:
    """Get the default path of the supervisor log file."""
    return get_log_dir() / "supervisor.log"


def get_cli_log_file() -> Path:
    """Get the default path of the CLI log file."""
    return get_log_dir() / "cli.log"

"""Shared utilities for Wilson."""

from ._logging import create_cli_logger, create_supervisor_logger
from ._paths import (
    APP_NAME,
    get_cli_log_file,
    get_config_dir,
    get_github_token_file,
    get_home_dir,
    get_log_dir,
    get_supervisor_log_file,
    get_user_config_file,
)

__all__ = [
    "APP_NAME",
    "create_cli_logger",
    "create_supervisor_logger",
    "get_cli_log_file",
    "get_config_dir",
    "get_github_token_file",
    "get_home_dir",
    "get_log_dir",
    "get_supervisor_log_file",
    "get_user_config_file",
]

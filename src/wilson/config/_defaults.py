"""Default configuration values.

This module defines the built-in default configuration values that are used
when no other configuration sources provide values.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
    "supervisor": {
        "health_interval": 30.0,
        "update_interval": 60.0,
        "probe_timeout": 3.0,
        "start_timeout": 30.0,
        "restart_timeout": 30.0,
        "stop_timeout": 5.0,
        "restart_backoff": 3.0,
        "shutdown_timeout": 30.0,
    },
    "updates": {
        "api_url": "https://api.github.com",
        "lookup_timeout": 10.0,
        "install_timeout": 120.0,
        "token_file": "",
    },
}

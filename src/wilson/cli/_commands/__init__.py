"""wilson-ctl commands."""

from typing import TYPE_CHECKING

from ._context import CLIContext
from ._health import app as health_app
from ._logs import app as logs_app
from ._restart import app as restart_app
from ._shared import (
    ExitCode,
    FormattableData,
    exit_with_error,
    format_json,
    get_console,
    get_error_console,
    print_json,
)
from ._status import app as status_app
from ._supervise import app as supervise_app
from ._update import app as update_app
from ._version import app as version_app

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "CLIContext",
    "ExitCode",
    "FormattableData",
    "exit_with_error",
    "format_json",
    "get_console",
    "get_error_console",
    "health_app",
    "logs_app",
    "print_json",
    "register_commands",
    "restart_app",
    "status_app",
    "supervise_app",
    "update_app",
    "version_app",
]


def register_commands(app: "App") -> None:
    _ = app.command(status_app)
    _ = app.command(health_app)
    _ = app.command(logs_app)
    _ = app.command(restart_app)
    _ = app.command(update_app)
    _ = app.command(supervise_app)
    _ = app.command(version_app)

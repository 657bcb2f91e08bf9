"""The command-line interface for Wilson."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from wilson import __version__
from wilson.config import safe_load_config
from wilson.services import default_registry
from wilson.utils import create_cli_logger

from ._commands import register_commands
from ._commands._context import CLIContext

APP_NAME = "wilson-ctl"
APP_HELP = "Orchestration across all Wilson-managed services."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Create the wilson-ctl application with its global-options meta app.

    Args:
        console: Console for regular output (stdout if None).
        error_console: Console for errors (stderr if None).
        exit_on_error: Exit on parse errors instead of raising.

    Returns:
        The configured cyclopts App; invoke ``app.meta()`` to run it.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name=APP_NAME,
        help=APP_HELP,
        version=__version__,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        verbose: Annotated[bool, Parameter(help="Enable verbose output")] = False,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
    ) -> None:
        """Launch wilson-ctl with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            verbose: Enable verbose output (debug-level CLI logging).
            config: Explicit path to config file.
        """
        loaded_config, config_error = safe_load_config(config_path=config)

        cli_logger = create_cli_logger(
            level="debug" if verbose else loaded_config.logging.level.value,
            log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
        )

        ctx = CLIContext(
            config=loaded_config,
            registry=default_registry(),
            verbose=verbose,
            config_error=config_error,
            logger=cli_logger,
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the `wilson-ctl` CLI."""
    app = create_app()
    app.meta()


if __name__ == "__main__":
    main()

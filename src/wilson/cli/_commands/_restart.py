"""wilson-ctl restart - restart one managed service through its CLI."""

from typing import Annotated

import anyio
from cyclopts import App, Parameter

from wilson.exceptions import ControlError, UnknownServiceError
from wilson.supervisor import ControlAction, build_control

from ._context import CLIContext
from ._shared import ExitCode, exit_with_error, get_console, print_json

app = App(
    name="restart",
    help="Restart a managed service via its CLI",
    help_on_error=True,
)


@app.default
def restart(
    service: Annotated[str, Parameter(help="Service to restart")],
    /,
    *,
    json_output: Annotated[
        bool, Parameter(name="--json", help="Machine-readable JSON output")
    ] = False,
) -> None:
    """Restart a managed service via its CLI."""
    ctx = CLIContext.get_current()
    try:
        descriptor = ctx.registry.by_name(service)
    except UnknownServiceError as e:
        exit_with_error(
            f"{e}. Services: {', '.join(ctx.registry.names())}", ExitCode.NOT_FOUND
        )

    if not descriptor.cli_path.exists():
        exit_with_error(f"{descriptor.name} CLI not found at {descriptor.cli_path}")

    control = build_control(ctx.config, logger=ctx.logger)
    try:
        anyio.run(control.run, descriptor, ControlAction.RESTART)
    except ControlError as e:
        if ctx.logger is not None:
            ctx.logger.error("restart_failed", service=descriptor.name, error=str(e))
        if json_output:
            print_json({"service": descriptor.name, "ok": False, "error": str(e)})
            raise SystemExit(ExitCode.FAILURE) from e
        exit_with_error(f"failed to restart {descriptor.name}: {e}")

    if json_output:
        print_json({"service": descriptor.name, "ok": True})
        return
    get_console().print(f"Restarted {descriptor.name}", markup=False)

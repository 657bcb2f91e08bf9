"""wilson-ctl supervise - run the long-lived supervisor."""

import anyio
from cyclopts import App

from wilson.supervisor import SupervisorExit, build_supervisor
from wilson.utils import create_supervisor_logger

from ._context import CLIContext

app = App(
    name="supervise",
    help="Run supervisor (long-lived, manages all services)",
    help_on_error=True,
)


@app.default
def supervise() -> None:
    """Run the supervisor until it is signalled or updates itself.

    Exits with status 0 after a completed shutdown and after a self-update,
    so that the platform process keeper relaunches the new version.
    """
    ctx = CLIContext.get_current()
    logging_config = ctx.config.logging
    logger = create_supervisor_logger(
        level=logging_config.level.value,
        log_format=logging_config.format.value,  # type: ignore[arg-type]
        log_file=logging_config.file,
    )
    if ctx.config_error is not None:
        logger.warning("config_load_failed", error=ctx.config_error)

    supervisor = build_supervisor(ctx.config, ctx.registry, logger=logger)
    result = anyio.run(supervisor.run)

    if result == SupervisorExit.SELF_UPDATE:
        logger.info("supervisor_exiting_for_relaunch")

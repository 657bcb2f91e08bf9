"""Wiring of supervisor components from configuration."""

from typing import TYPE_CHECKING

from ._control import ProcessControl
from ._health import HealthProbe
from ._installer import ScriptInstaller
from ._process import AnyioProcessRunner
from ._releases import GitHubReleaseSource, read_auth_token
from ._supervisor import Supervisor
from ._updater import UpdateChecker

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from wilson.config import Config
    from wilson.services import ServiceRegistry

    from ._protocol import ProcessRunner


def build_probe(
    config: "Config", *, logger: "FilteringBoundLogger | None" = None
) -> HealthProbe:
    """Build a health probe using the configured probe timeout."""
    return HealthProbe(timeout=config.supervisor.probe_timeout, logger=logger)


def build_control(
    config: "Config",
    *,
    runner: "ProcessRunner | None" = None,
    logger: "FilteringBoundLogger | None" = None,
) -> ProcessControl:
    """Build process control using the configured timeouts and backoff."""
    settings = config.supervisor
    return ProcessControl(
        runner if runner is not None else AnyioProcessRunner(),
        start_timeout=settings.start_timeout,
        stop_timeout=settings.stop_timeout,
        restart_timeout=settings.restart_timeout,
        restart_backoff=settings.restart_backoff,
        logger=logger,
    )


def build_updater(
    config: "Config",
    control: ProcessControl,
    *,
    runner: "ProcessRunner | None" = None,
    logger: "FilteringBoundLogger | None" = None,
) -> UpdateChecker:
    """Build an update checker against the configured release API."""
    updates = config.updates
    return UpdateChecker(
        GitHubReleaseSource(
            api_url=updates.api_url,
            timeout=updates.lookup_timeout,
            logger=logger,
        ),
        ScriptInstaller(
            runner if runner is not None else AnyioProcessRunner(),
            timeout=updates.install_timeout,
            logger=logger,
        ),
        control,
        logger=logger,
    )


def load_token(config: "Config") -> str | None:
    """Read the GitHub token from the configured token file."""
    return read_auth_token(config.updates.resolved_token_file())


def build_supervisor(
    config: "Config",
    registry: "ServiceRegistry",
    *,
    logger: "FilteringBoundLogger | None" = None,
) -> Supervisor:
    """Build a fully wired supervisor from configuration.

    Args:
        config: Loaded configuration.
        registry: The services to manage.
        logger: Logger shared by every component.

    Returns:
        A supervisor ready to ``run``.
    """
    runner = AnyioProcessRunner()
    control = build_control(config, runner=runner, logger=logger)
    return Supervisor(
        registry,
        probe=build_probe(config, logger=logger),
        control=control,
        updater=build_updater(config, control, runner=runner, logger=logger),
        settings=config.supervisor,
        token=load_token(config),
        logger=logger,
    )

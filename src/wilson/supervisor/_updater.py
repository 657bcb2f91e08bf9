"""Per-service update checking: compare, install, restart."""

from typing import TYPE_CHECKING, final

import structlog

from wilson.exceptions import ControlError, UpdateError, UpdateErrorKind

from ._models import ControlAction, UpdateOutcome
from ._releases import read_current_version

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from wilson.services import ServiceDescriptor

    from ._control import ProcessControl
    from ._protocol import Installer, ReleaseSource


@final
class UpdateChecker:
    """Brings one service up to its latest released version.

    ``check`` never raises for a per-service failure; every failing step is
    reported through the returned UpdateOutcome.
    """

    __slots__ = ("_control", "_installer", "_logger", "_releases")

    def __init__(
        self,
        releases: "ReleaseSource",
        installer: "Installer",
        control: "ProcessControl",
        *,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the update checker.

        Args:
            releases: Looks up the latest released version.
            installer: Installs a new release.
            control: Restarts a service after install.
            logger: Optional logger (defaults to a module logger).
        """
        self._releases = releases
        self._installer = installer
        self._control = control
        self._logger = logger or structlog.get_logger(__name__)

    async def check(
        self,
        descriptor: "ServiceDescriptor",
        token: str | None = None,
    ) -> UpdateOutcome:
        """Check one service and update it if a newer release exists.

        Args:
            descriptor: The service to check.
            token: Optional GitHub token for lookup and install.

        Returns:
            The outcome of the check.
        """
        log = self._logger.bind(service=descriptor.name)
        current = read_current_version(descriptor)

        try:
            latest = await self._releases.latest_version(descriptor, token)
        except UpdateError as e:
            log.warning("update_lookup_failed", error=str(e), kind=e.kind.value)
            return UpdateOutcome.failed(str(e), e.kind, from_version=current)

        if latest == current:
            log.debug("update_not_needed", version=current)
            return UpdateOutcome.current(current)

        log.info("update_available", from_version=current, to_version=latest)

        try:
            await self._installer.install(
                descriptor,
                token=token,
                skip_platform_reload=descriptor.is_supervisor,
            )
        except UpdateError as e:
            log.error("update_install_failed", error=str(e), to_version=latest)
            return UpdateOutcome.failed(
                str(e), e.kind, from_version=current, to_version=latest
            )

        if not descriptor.is_supervisor:
            try:
                await self._control.run(descriptor, ControlAction.RESTART)
            except ControlError as e:
                msg = f"installed {latest} but restart failed: {e}"
                log.error("update_restart_failed", error=msg, attempts=e.attempts)
                return UpdateOutcome.failed(
                    msg,
                    UpdateErrorKind.RESTART_FAILURE,
                    from_version=current,
                    to_version=latest,
                )

        log.info("update_applied", from_version=current, to_version=latest)
        return UpdateOutcome(updated=True, from_version=current, to_version=latest)

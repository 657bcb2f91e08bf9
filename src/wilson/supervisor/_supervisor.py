"""Main supervisor coordinating startup, health enforcement and updates.

This module provides the Supervisor class. It runs a startup pass over the
registry, then two independently cancellable periodic loops (health and
round-robin updates) inside one anyio task group, and finally either stops
every service in reverse order or hands off to a freshly installed copy of
itself.
"""

import signal
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, final

import anyio
import anyio.abc
import structlog

from wilson.config import SupervisorSettings
from wilson.exceptions import ControlError

from ._models import (
    ControlAction,
    HealthResult,
    SupervisorExit,
    SupervisorState,
    UpdateTick,
)

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from wilson.services import ServiceDescriptor, ServiceRegistry

    from ._control import ProcessControl
    from ._health import HealthProbe
    from ._protocol import RestartEscalation
    from ._updater import UpdateChecker


@final
class Supervisor:
    """Keeps a fixed set of services running, healthy and up to date.

    A failure of any single service is logged and never stops the
    supervisor. It exits only after a completed shutdown or after it has
    installed a new version of itself.
    """

    __slots__ = (
        "_control",
        "_cursor",
        "_escalation",
        "_exit",
        "_logger",
        "_probe",
        "_registry",
        "_settings",
        "_shutdown_requested",
        "_state",
        "_stop_event",
        "_token",
        "_updater",
    )

    def __init__(  # noqa: PLR0913
        self,
        registry: "ServiceRegistry",
        *,
        probe: "HealthProbe",
        control: "ProcessControl",
        updater: "UpdateChecker",
        settings: SupervisorSettings | None = None,
        token: str | None = None,
        logger: "FilteringBoundLogger | None" = None,
        escalation: "RestartEscalation | None" = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            registry: The services to manage, in startup order.
            probe: Health probe.
            control: Service control.
            updater: Per-service update checker.
            settings: Timing settings (defaults if None).
            token: GitHub token for release lookups and installs.
            logger: Optional logger (defaults to a module logger).
            escalation: Optional hook for restarts that failed twice.
        """
        self._registry = registry
        self._probe = probe
        self._control = control
        self._updater = updater
        self._settings = settings if settings is not None else SupervisorSettings()
        self._token = token
        self._logger = logger or structlog.get_logger(__name__)
        self._escalation = escalation

        self._state = SupervisorState.STARTING
        self._cursor = 0
        self._exit = SupervisorExit.SHUTDOWN
        self._shutdown_requested = False
        self._stop_event: anyio.Event | None = None

    @property
    def state(self) -> SupervisorState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def cursor(self) -> int:
        """Return the index of the service the next update tick will check."""
        return self._cursor

    @property
    def registry(self) -> "ServiceRegistry":
        """Return the managed registry."""
        return self._registry

    def reset_update_cursor(self) -> None:
        """Point the next update tick at the first service."""
        self._cursor = 0

    def request_shutdown(self) -> None:
        """Ask a running supervisor to shut down.

        Safe to call before ``run``; the supervisor will then stop as soon
        as its startup pass completes.
        """
        self._shutdown_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    async def ensure_services_running(self) -> list[str]:
        """Start every service that is not healthy, in registry order.

        Failures are logged and the pass continues with the next service.

        Returns:
            Names of the services a start was attempted for.
        """
        attempted: list[str] = []
        for descriptor in self._registry:
            result = await self._probe.probe(descriptor)
            if result.healthy:
                self._logger.info("service_already_running", service=descriptor.name)
                continue

            attempted.append(descriptor.name)
            self._logger.info(
                "service_starting",
                service=descriptor.name,
                health=result.status.value,
                reason=result.message,
            )
            try:
                await self._control.run(descriptor, ControlAction.START)
            except ControlError as e:
                self._logger.error(
                    "service_start_failed",
                    service=descriptor.name,
                    error=str(e),
                    kind=e.kind.value,
                )
            else:
                self._logger.info("service_started", service=descriptor.name)
        return attempted

    async def _escalate(
        self, descriptor: "ServiceDescriptor", error: ControlError
    ) -> None:
        if self._escalation is None:
            return
        try:
            await self._escalation.escalate(descriptor, error)
        except Exception:  # noqa: BLE001
            self._logger.exception("restart_escalation_failed", service=descriptor.name)

    async def run_health_check(self) -> dict[str, HealthResult]:
        """Probe every service and restart the ones that are not healthy.

        Returns:
            Health results keyed by service name, in registry order.
        """
        results: dict[str, HealthResult] = {}
        for descriptor in self._registry:
            result = await self._probe.probe(descriptor)
            results[descriptor.name] = result
            if result.healthy:
                self._logger.debug("service_healthy", service=descriptor.name)
                continue

            self._logger.warning(
                "service_unhealthy",
                service=descriptor.name,
                health=result.status.value,
                reason=result.message,
            )
            try:
                await self._control.run(descriptor, ControlAction.RESTART)
            except ControlError as e:
                self._logger.error(
                    "service_restart_failed",
                    service=descriptor.name,
                    error=str(e),
                    attempts=e.attempts,
                )
                await self._escalate(descriptor, e)
            else:
                self._logger.info("service_restarted", service=descriptor.name)
        return results

    async def run_update_check(self) -> UpdateTick:
        """Check the service at the cursor for updates and advance the cursor.

        The cursor advances before the check, so a failing service never
        blocks the others.
        """
        descriptors = self._registry.list()
        descriptor = descriptors[self._cursor]
        self._cursor = (self._cursor + 1) % len(descriptors)

        outcome = await self._updater.check(descriptor, self._token)
        tick = UpdateTick(
            service=descriptor.name,
            outcome=outcome,
            self_update_installed=descriptor.is_supervisor and outcome.updated,
        )

        if outcome.updated:
            self._logger.info(
                "service_updated",
                service=descriptor.name,
                from_version=outcome.from_version,
                to_version=outcome.to_version,
            )
        elif outcome.error is not None:
            self._logger.warning(
                "update_check_failed",
                service=descriptor.name,
                error=outcome.error,
                kind=outcome.error_kind.value if outcome.error_kind else None,
            )
        else:
            self._logger.debug("service_up_to_date", service=descriptor.name)
        return tick

    async def stop_all_services(self) -> None:
        """Stop every service in reverse registry order.

        Failures are logged and the pass continues with the next service.
        """
        for descriptor in self._registry.reversed():
            try:
                await self._control.run(
                    descriptor,
                    ControlAction.STOP,
                    timeout=self._settings.stop_timeout,
                )
            except ControlError as e:
                self._logger.warning(
                    "service_stop_failed",
                    service=descriptor.name,
                    error=str(e),
                    kind=e.kind.value,
                )
            else:
                self._logger.info("service_stopped", service=descriptor.name)

    async def _periodic(
        self,
        name: str,
        interval: float,
        tick: Callable[[], Awaitable[None]],
    ) -> None:
        while True:
            await anyio.sleep(interval)
            try:
                await tick()
            except Exception:  # noqa: BLE001
                # A broken tick must not end the loop
                self._logger.exception("periodic_tick_failed", loop=name)

    async def _health_tick(self) -> None:
        _ = await self.run_health_check()

    async def _update_tick(self) -> None:
        tick = await self.run_update_check()
        if tick.self_update_installed:
            self._logger.info(
                "self_update_installed",
                to_version=tick.outcome.to_version,
            )
            self._exit = SupervisorExit.SELF_UPDATE
            if self._stop_event is not None:
                self._stop_event.set()

    async def _watch_signals(
        self, *, task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED
    ) -> None:
        # Installed until the run returns; repeat signals are logged only
        with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
            task_status.started()
            async for signum in signals:
                if self._shutdown_requested:
                    self._logger.warning(
                        "shutdown_signal_ignored",
                        signal=signum.name,
                        state=self._state.value,
                    )
                    continue
                self._logger.info("shutdown_signal_received", signal=signum.name)
                self.request_shutdown()

    async def run(self, *, handle_signals: bool = True) -> SupervisorExit:
        """Run the supervisor until shutdown or self-update.

        Args:
            handle_signals: Install SIGINT/SIGTERM handling (main thread only).
                Handling stays active until the run returns.

        Returns:
            How the run ended.
        """
        self._stop_event = anyio.Event()
        if self._shutdown_requested:
            self._stop_event.set()
        self._exit = SupervisorExit.SHUTDOWN
        self._state = SupervisorState.STARTING

        async with anyio.create_task_group() as tg:
            if handle_signals:
                await tg.start(self._watch_signals)
            result = await self._run_until_stopped(self._stop_event)
            tg.cancel_scope.cancel()
        return result

    async def _run_until_stopped(self, stop_event: anyio.Event) -> SupervisorExit:
        self._logger.info("supervisor_starting", services=self._registry.names())

        async with anyio.create_task_group() as tg:
            _ = await self.ensure_services_running()
            self._state = SupervisorState.RUNNING
            self._logger.info("supervisor_running")

            if not stop_event.is_set():
                tg.start_soon(
                    self._periodic,
                    "health",
                    self._settings.health_interval,
                    self._health_tick,
                )
                tg.start_soon(
                    self._periodic,
                    "update",
                    self._settings.update_interval,
                    self._update_tick,
                )
                await stop_event.wait()

            # No new tick may start once the loops are cancelled
            tg.cancel_scope.cancel()

        if self._exit == SupervisorExit.SELF_UPDATE:
            self._state = SupervisorState.STOPPED
            self._logger.info("supervisor_self_update_handoff")
            return SupervisorExit.SELF_UPDATE

        self._state = SupervisorState.SHUTTING_DOWN
        self._logger.info("supervisor_shutting_down")
        with anyio.move_on_after(self._settings.shutdown_timeout) as scope:
            await self.stop_all_services()
        if scope.cancelled_caught:
            self._logger.warning(
                "shutdown_timeout_exceeded",
                timeout=self._settings.shutdown_timeout,
            )

        self._state = SupervisorState.STOPPED
        self._logger.info("supervisor_stopped")
        return SupervisorExit.SHUTDOWN

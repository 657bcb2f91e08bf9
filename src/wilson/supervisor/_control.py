"""Service control through each service's own control command."""

from functools import partial
from typing import TYPE_CHECKING, final

import anyio
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from wilson.exceptions import ControlError, ControlErrorKind

from ._models import ControlAction

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from wilson.services import ServiceDescriptor

    from ._protocol import ProcessRunner

DEFAULT_START_TIMEOUT: float = 30.0
DEFAULT_STOP_TIMEOUT: float = 5.0
DEFAULT_RESTART_TIMEOUT: float = 30.0
DEFAULT_RESTART_BACKOFF: float = 3.0

# First attempt plus exactly one retry
RESTART_ATTEMPTS: int = 2

# Captured stderr kept on a ControlError
_STDERR_LIMIT: int = 4096


@final
class ProcessControl:
    """Starts, stops and restarts services by running ``<cli_path> <action>``.

    ``start`` and ``stop`` are attempted exactly once. ``restart`` is retried
    exactly once after a fixed backoff.
    """

    __slots__ = ("_logger", "_restart_backoff", "_runner", "_timeouts")

    def __init__(  # noqa: PLR0913
        self,
        runner: "ProcessRunner",
        *,
        start_timeout: float = DEFAULT_START_TIMEOUT,
        stop_timeout: float = DEFAULT_STOP_TIMEOUT,
        restart_timeout: float = DEFAULT_RESTART_TIMEOUT,
        restart_backoff: float = DEFAULT_RESTART_BACKOFF,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize process control.

        Args:
            runner: Runs the control command.
            start_timeout: Default seconds allowed for ``start``.
            stop_timeout: Default seconds allowed for ``stop``.
            restart_timeout: Default seconds allowed per ``restart`` attempt.
            restart_backoff: Seconds to wait before retrying a restart.
            logger: Optional logger (defaults to a module logger).
        """
        self._runner = runner
        self._timeouts: dict[ControlAction, float] = {
            ControlAction.START: start_timeout,
            ControlAction.STOP: stop_timeout,
            ControlAction.RESTART: restart_timeout,
        }
        self._restart_backoff = restart_backoff
        self._logger = logger or structlog.get_logger(__name__)

    def default_timeout(self, action: ControlAction) -> float:
        """Return the configured timeout for an action."""
        return self._timeouts[action]

    def _log_restart_retry(
        self, descriptor: "ServiceDescriptor", retry_state: RetryCallState
    ) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self._logger.warning(
            "restart_attempt_failed",
            service=descriptor.name,
            attempt=retry_state.attempt_number,
            error=str(error),
            retry_in=self._restart_backoff,
        )

    async def _attempt(
        self,
        descriptor: "ServiceDescriptor",
        action: ControlAction,
        timeout: float,
        attempt: int,
    ) -> None:
        command = [str(descriptor.cli_path), action.value]
        try:
            result = await self._runner.run(command, timeout=timeout)
        except TimeoutError as e:
            msg = f"{descriptor.name} {action} timed out after {timeout}s"
            raise ControlError(
                msg,
                kind=ControlErrorKind.TIMEOUT,
                service_name=descriptor.name,
                action=action.value,
                attempts=attempt,
            ) from e
        except OSError as e:
            msg = f"failed to run {command[0]}: {e}"
            raise ControlError(
                msg,
                kind=ControlErrorKind.SPAWN_FAILURE,
                service_name=descriptor.name,
                action=action.value,
                attempts=attempt,
            ) from e

        if not result.success:
            stderr = result.stderr.strip()[-_STDERR_LIMIT:]
            msg = f"{descriptor.name} {action} exited with code {result.exit_code}"
            if stderr:
                msg = f"{msg}: {stderr}"
            raise ControlError(
                msg,
                kind=ControlErrorKind.NON_ZERO_EXIT,
                service_name=descriptor.name,
                action=action.value,
                exit_code=result.exit_code,
                stderr=stderr,
                attempts=attempt,
            )

    async def run(
        self,
        descriptor: "ServiceDescriptor",
        action: ControlAction,
        timeout: float | None = None,
    ) -> None:
        """Run a control action for one service.

        Args:
            descriptor: The service to control.
            action: The control verb.
            timeout: Seconds allowed per attempt (defaults per action).

        Raises:
            ControlError: If the action failed (after the retry, for restart).
        """
        effective_timeout = (
            timeout if timeout is not None else self.default_timeout(action)
        )
        self._logger.debug(
            "control_command_started",
            service=descriptor.name,
            action=action.value,
            timeout=effective_timeout,
        )

        if action != ControlAction.RESTART:
            await self._attempt(descriptor, action, effective_timeout, attempt=1)
            return

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(ControlError),
            stop=stop_after_attempt(RESTART_ATTEMPTS),
            wait=wait_fixed(self._restart_backoff),
            sleep=anyio.sleep,
            before_sleep=partial(self._log_restart_retry, descriptor),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await self._attempt(
                    descriptor,
                    action,
                    effective_timeout,
                    attempt=attempt.retry_state.attempt_number,
                )

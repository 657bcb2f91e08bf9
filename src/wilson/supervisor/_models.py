"""Data models for the supervisor system.

This module defines the core data types for service supervision:
- HealthStatus / HealthResult: Classified outcome of one health probe
- ControlAction: Verbs accepted by a service control command
- ProcessResult: Captured result of one finished subprocess
- UpdateOutcome: Result of one update check for one service
- UpdateTick: Result of one round-robin update tick
- SupervisorState / SupervisorExit: Supervisor lifecycle
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from wilson.exceptions import ProbeErrorKind, UpdateErrorKind


class HealthStatus(StrEnum):
    """Classified health of a service.

    - HEALTHY: The endpoint reported ``status == "healthy"``
    - DEGRADED: The endpoint answered but reported another status
    - UNREACHABLE: No usable answer (timeout, refused, bad response)
    """

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True, slots=True)
class HealthResult:
    """Immutable result of one health probe.

    Attributes:
        status: Classified health.
        message: Human-readable detail for non-healthy results.
        error: Failure classification when the probe got no usable answer.
        payload: The decoded health JSON when the endpoint answered.
    """

    status: HealthStatus
    message: str | None = None
    error: ProbeErrorKind | None = None
    payload: dict[str, Any] | None = None

    @property
    def healthy(self) -> bool:
        """Return True if the service reported itself healthy."""
        return self.status == HealthStatus.HEALTHY

    @property
    def version(self) -> str | None:
        """Return the version reported by the health endpoint, if any."""
        if self.payload is None:
            return None
        version = self.payload.get("version")
        return version if isinstance(version, str) and version else None


class ControlAction(StrEnum):
    """Verbs accepted by a service control command."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Result of a subprocess that ran to completion.

    Attributes:
        exit_code: Process exit code.
        stdout: Captured (truncated) standard output.
        stderr: Captured (truncated) standard error.
    """

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        """Return True if the process exited with code 0."""
        return self.exit_code == 0


@dataclass(frozen=True, slots=True)
class UpdateOutcome:
    """Immutable outcome of one update check.

    ``updated=False`` with no error means the service is already current.
    ``updated=False`` with an error means a step failed. ``updated=True``
    always carries both versions; an unknown installed version is ``""``.

    Attributes:
        updated: Whether a new version was installed (and restarted).
        from_version: Version installed before the check.
        to_version: Version installed by the check.
        error: Human-readable failure, if a step failed.
        error_kind: The step that failed.
    """

    updated: bool
    from_version: str | None = None
    to_version: str | None = None
    error: str | None = None
    error_kind: UpdateErrorKind | None = None

    def __post_init__(self) -> None:
        if self.updated and (self.error is not None or self.error_kind is not None):
            msg = "An applied update cannot carry an error"
            raise ValueError(msg)
        if self.updated and (self.from_version is None or not self.to_version):
            msg = "An applied update must carry from_version and to_version"
            raise ValueError(msg)

    @classmethod
    def current(cls, version: str) -> "UpdateOutcome":
        """Build the outcome for a service already on the latest version."""
        return cls(updated=False, from_version=version, to_version=version)

    @classmethod
    def failed(
        cls,
        error: str,
        kind: UpdateErrorKind,
        *,
        from_version: str | None = None,
        to_version: str | None = None,
    ) -> "UpdateOutcome":
        """Build the outcome for a failed update step."""
        return cls(
            updated=False,
            from_version=from_version,
            to_version=to_version,
            error=error,
            error_kind=kind,
        )


@dataclass(frozen=True, slots=True)
class UpdateTick:
    """Result of one update-loop tick.

    Attributes:
        service: Name of the service checked on this tick.
        outcome: The update outcome for that service.
        self_update_installed: True when the supervisor updated itself.
    """

    service: str
    outcome: UpdateOutcome
    self_update_installed: bool = False


class SupervisorState(StrEnum):
    """Supervisor lifecycle states.

    STARTING -> RUNNING -> SHUTTING_DOWN -> STOPPED, plus the direct
    RUNNING -> STOPPED transition after a self-update.
    """

    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class SupervisorExit(StrEnum):
    """How the supervisor's run ended."""

    SHUTDOWN = "shutdown"
    SELF_UPDATE = "self_update"

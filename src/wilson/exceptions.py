"""Wilson exceptions."""

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class WilsonError(Exception):
    """Base exception for Wilson errors."""


class ConfigError(WilsonError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: "Path | None" = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value
        self.expected: str = expected
        self.source: str | None = source


# =============================================================================
# Supervisor Exceptions
# =============================================================================


class ProbeErrorKind(StrEnum):
    """Ways a health probe can fail."""

    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    BAD_RESPONSE = "bad_response"


class ControlErrorKind(StrEnum):
    """Ways a control command invocation can fail."""

    SPAWN_FAILURE = "spawn_failure"
    NON_ZERO_EXIT = "non_zero_exit"
    TIMEOUT = "timeout"


class UpdateErrorKind(StrEnum):
    """Steps of an update check that can fail."""

    LOOKUP_FAILURE = "lookup_failure"
    MISSING_VERSION_TAG = "missing_version_tag"
    INSTALL_FAILURE = "install_failure"
    RESTART_FAILURE = "restart_failure"


class SupervisorError(WilsonError):
    """Base exception for supervisor errors."""


class UnknownServiceError(SupervisorError, KeyError):
    """Raised when a service cannot be found by name.

    Attributes:
        service_name: The name of the service that was not found.
    """

    def __init__(self, message: str, *, service_name: str | None = None) -> None:
        """Initialize with error message and service context.

        Args:
            message: Human-readable error message.
            service_name: The name of the service that was not found.
        """
        super().__init__(message)
        self.service_name: str | None = service_name

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class ProbeError(SupervisorError):
    """Raised inside the health probe; always converted to a HealthResult.

    Attributes:
        kind: The failure classification.
    """

    def __init__(self, message: str, *, kind: ProbeErrorKind) -> None:
        """Initialize with error message and failure kind."""
        super().__init__(message)
        self.kind: ProbeErrorKind = kind


class ControlError(SupervisorError):
    """Raised when a control command (start/stop/restart) fails.

    Attributes:
        kind: The failure classification.
        service_name: The service the command was run for.
        action: The control action that failed.
        exit_code: Exit code of the command, if it exited.
        stderr: Captured (truncated) error output.
        attempts: Number of attempts made before giving up.
    """

    def __init__(  # noqa: PLR0913
        self,
        message: str,
        *,
        kind: ControlErrorKind,
        service_name: str | None = None,
        action: str | None = None,
        exit_code: int | None = None,
        stderr: str = "",
        attempts: int = 1,
    ) -> None:
        """Initialize with error message and command context.

        Args:
            message: Human-readable error message.
            kind: The failure classification.
            service_name: The service the command was run for.
            action: The control action that failed.
            exit_code: Exit code of the command, if it exited.
            stderr: Captured error output.
            attempts: Number of attempts made.
        """
        super().__init__(message)
        self.kind: ControlErrorKind = kind
        self.service_name: str | None = service_name
        self.action: str | None = action
        self.exit_code: int | None = exit_code
        self.stderr: str = stderr
        self.attempts: int = attempts


class UpdateError(SupervisorError):
    """Raised by an update step; always converted to an UpdateOutcome.

    Attributes:
        kind: The step that failed.
        service_name: The service being updated.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: UpdateErrorKind,
        service_name: str | None = None,
    ) -> None:
        """Initialize with error message and update context."""
        super().__init__(message)
        self.kind: UpdateErrorKind = kind
        self.service_name: str | None = service_name

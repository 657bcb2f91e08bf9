"""Protocol definitions for the supervisor system.

This module defines the seams that decouple the supervisor core from the
outside world, so each can be replaced by an in-memory double in tests:
- ProcessRunner: Runs a subprocess to completion with a time bound
- ReleaseSource: Looks up the latest released version of a service
- Installer: Installs the latest release of a service
- RestartEscalation: Optional hook for restarts that failed twice
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from wilson.exceptions import ControlError
    from wilson.services import ServiceDescriptor

    from ._models import ProcessResult


@runtime_checkable
class ProcessRunner(Protocol):
    """Protocol for running subprocesses.

    Implementations must kill the child if it does not exit within
    ``timeout`` seconds, or if the waiting task is cancelled.
    """

    async def run(
        self,
        command: Sequence[str],
        *,
        timeout: float,
        env: Mapping[str, str] | None = None,
    ) -> "ProcessResult":
        """Run a command to completion.

        Args:
            command: Program and arguments.
            timeout: Seconds to wait before killing the process.
            env: Full environment for the child, or None to inherit.

        Returns:
            The exit code and captured output.

        Raises:
            OSError: If the process could not be spawned.
            TimeoutError: If the process was killed after ``timeout``.
        """
        ...


@runtime_checkable
class ReleaseSource(Protocol):
    """Protocol for looking up released versions."""

    async def latest_version(
        self,
        descriptor: "ServiceDescriptor",
        token: str | None = None,
    ) -> str:
        """Return the normalized latest released version of a service.

        Raises:
            UpdateError: With LOOKUP_FAILURE or MISSING_VERSION_TAG.
        """
        ...


@runtime_checkable
class Installer(Protocol):
    """Protocol for installing the latest release of a service."""

    async def install(
        self,
        descriptor: "ServiceDescriptor",
        *,
        token: str | None = None,
        skip_platform_reload: bool = False,
    ) -> None:
        """Install the latest release.

        Args:
            descriptor: The service to install.
            token: Optional GitHub token passed to the installer.
            skip_platform_reload: Ask the installer not to reload the
                service through the platform process keeper.

        Raises:
            UpdateError: With INSTALL_FAILURE.
        """
        ...


@runtime_checkable
class RestartEscalation(Protocol):
    """Hook invoked when a health-driven restart fails after its retry."""

    async def escalate(
        self,
        descriptor: "ServiceDescriptor",
        error: "ControlError",
    ) -> None:
        """Handle a service that could not be restarted."""
        ...

"""Installer invocation through each service's published install script."""

import os
from pathlib import Path
from typing import TYPE_CHECKING, final

import structlog

from wilson.exceptions import UpdateError, UpdateErrorKind

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from wilson.services import ServiceDescriptor

    from ._protocol import ProcessRunner

DEFAULT_INSTALL_TIMEOUT: float = 120.0
INSTALL_SCRIPT_BASE = "https://raw.githubusercontent.com"

_STDERR_LIMIT: int = 4096


def install_command(repo: str) -> list[str]:
    """Build the shell pipeline that fetches and runs a repo's install script."""
    script_url = f"{INSTALL_SCRIPT_BASE}/{repo}/main/scripts/install.sh"
    return ["bash", "-c", f"curl -fsSL {script_url} | bash"]


def install_environment(
    *,
    token: str | None = None,
    skip_platform_reload: bool = False,
) -> dict[str, str]:
    """Build the minimal environment passed to the install script.

    Args:
        token: GitHub token, exported as GITHUB_TOKEN when present.
        skip_platform_reload: Export ``SKIP_LAUNCHAGENT_RELOAD=1``.

    Returns:
        Environment containing only PATH, HOME and the optional variables.
    """
    env = {
        "PATH": os.environ.get("PATH", ""),
        "HOME": os.environ.get("HOME", str(Path.home())),
    }
    if token:
        env["GITHUB_TOKEN"] = token
    if skip_platform_reload:
        env["SKIP_LAUNCHAGENT_RELOAD"] = "1"
    return env


@final
class ScriptInstaller:
    """Installs a service by piping its ``scripts/install.sh`` into bash."""

    __slots__ = ("_logger", "_runner", "_timeout")

    def __init__(
        self,
        runner: "ProcessRunner",
        *,
        timeout: float = DEFAULT_INSTALL_TIMEOUT,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        self._runner = runner
        self._timeout = timeout
        self._logger = logger or structlog.get_logger(__name__)

    async def install(
        self,
        descriptor: "ServiceDescriptor",
        *,
        token: str | None = None,
        skip_platform_reload: bool = False,
    ) -> None:
        """Install the latest release of a service.

        Raises:
            UpdateError: With INSTALL_FAILURE if the script could not be
                spawned, timed out or exited non-zero.
        """
        command = install_command(descriptor.repo)
        env = install_environment(
            token=token, skip_platform_reload=skip_platform_reload
        )
        self._logger.info(
            "install_started",
            service=descriptor.name,
            repo=descriptor.repo,
            skip_platform_reload=skip_platform_reload,
        )

        try:
            result = await self._runner.run(command, timeout=self._timeout, env=env)
        except TimeoutError as e:
            msg = f"install timed out after {self._timeout:g}s for {descriptor.name}"
            raise UpdateError(
                msg, kind=UpdateErrorKind.INSTALL_FAILURE, service_name=descriptor.name
            ) from e
        except OSError as e:
            msg = f"install could not start for {descriptor.name}: {e}"
            raise UpdateError(
                msg, kind=UpdateErrorKind.INSTALL_FAILURE, service_name=descriptor.name
            ) from e

        if not result.success:
            stderr = result.stderr.strip()[-_STDERR_LIMIT:]
            msg = f"install failed for {descriptor.name} (exit {result.exit_code})"
            if stderr:
                msg = f"{msg}: {stderr}"
            raise UpdateError(
                msg, kind=UpdateErrorKind.INSTALL_FAILURE, service_name=descriptor.name
            )

        self._logger.info("install_completed", service=descriptor.name)

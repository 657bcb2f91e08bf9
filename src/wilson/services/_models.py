"""Data model for managed services."""

from dataclasses import dataclass
from pathlib import Path  # noqa: TC003 - Used in runtime type annotations


@dataclass(frozen=True, slots=True)
class ServiceDescriptor:
    """Static description of one managed service.

    Descriptors are built once when the registry is constructed and live for
    the lifetime of the process.

    Attributes:
        name: Unique identifier for the service.
        display_name: Human-readable name.
        repo: Release coordinates on GitHub (``owner/name``).
        port: Port the service listens on.
        health_url: URL of the service health endpoint.
        install_base: Directory the service is installed under.
        current_version_file: File holding the installed version string.
        cli_path: Control command accepting ``start``, ``stop`` and ``restart``.
        config_dir: Service config directory (holds ``<name>.pid``).
        log_file: The service daemon log.
        is_supervisor: True only for the supervisor's own deployable unit.
    """

    name: str
    display_name: str
    repo: str
    port: int
    health_url: str
    install_base: Path
    current_version_file: Path
    cli_path: Path
    config_dir: Path
    log_file: Path
    is_supervisor: bool = False

    @property
    def pid_file(self) -> Path:
        """Return the path of the pid file written by the service daemon."""
        return self.config_dir / f"{self.name}.pid"

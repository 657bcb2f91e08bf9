"""Ordered registry of the services Wilson manages."""

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import final

from wilson.exceptions import UnknownServiceError
from wilson.utils import get_config_dir, get_home_dir

from ._models import ServiceDescriptor

SUPERVISOR_LOG_SOURCE = "supervisor"

# (name, display name, port), in startup order
_DEFAULT_SERVICES: tuple[tuple[str, str, int], ...] = (
    ("engram", "Engram", 7749),
    ("synapse", "Synapse", 7750),
    ("cortex", "Cortex", 7751),
    ("wilson", "Wilson", 7748),
)
_REPO_OWNER = "shetty4l"
_SUPERVISOR_NAME = "wilson"


@final
class ServiceRegistry:
    """Immutable, ordered collection of service descriptors.

    Iteration order is startup order; ``reversed()`` gives shutdown order.
    """

    __slots__ = ("_by_name", "_descriptors")

    def __init__(self, descriptors: Iterable[ServiceDescriptor]) -> None:
        """Initialize the registry.

        Args:
            descriptors: Descriptors in startup order.

        Raises:
            ValueError: If there are no descriptors or a name is repeated.
        """
        self._descriptors: tuple[ServiceDescriptor, ...] = tuple(descriptors)
        if not self._descriptors:
            msg = "Service registry must contain at least one service"
            raise ValueError(msg)

        self._by_name: dict[str, ServiceDescriptor] = {}
        for descriptor in self._descriptors:
            if descriptor.name in self._by_name:
                msg = f"Duplicate service name: {descriptor.name!r}"
                raise ValueError(msg)
            self._by_name[descriptor.name] = descriptor

    def names(self) -> list[str]:
        """Return the service names in startup order."""
        return [descriptor.name for descriptor in self._descriptors]

    # Defined after names(): the method shadows the builtin in the class body.
    def list(self) -> tuple[ServiceDescriptor, ...]:
        """Return every descriptor in startup order."""
        return self._descriptors

    def by_name(self, name: str) -> ServiceDescriptor:
        """Get a descriptor by service name.

        Args:
            name: The service name.

        Returns:
            The matching descriptor.

        Raises:
            UnknownServiceError: If no service has that name.
        """
        descriptor = self._by_name.get(name)
        if descriptor is None:
            msg = f'unknown service "{name}"'
            raise UnknownServiceError(msg, service_name=name)
        return descriptor

    def reversed(self) -> tuple[ServiceDescriptor, ...]:
        """Return every descriptor in shutdown order."""
        return self._descriptors[::-1]

    @property
    def supervisor_service(self) -> ServiceDescriptor | None:
        """Return the supervisor's own descriptor, if registered."""
        for descriptor in self._descriptors:
            if descriptor.is_supervisor:
                return descriptor
        return None

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[ServiceDescriptor]:
        return iter(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


def _build_descriptor(
    name: str, display_name: str, port: int, home: Path
) -> ServiceDescriptor:
    install_base = home / "srv" / name
    config_dir = get_config_dir(name)
    return ServiceDescriptor(
        name=name,
        display_name=display_name,
        repo=f"{_REPO_OWNER}/{name}",
        port=port,
        health_url=f"http://localhost:{port}/health",
        install_base=install_base,
        current_version_file=install_base / "current-version",
        cli_path=home / ".local" / "bin" / name,
        config_dir=config_dir,
        log_file=config_dir / f"{name}.log",
        is_supervisor=name == _SUPERVISOR_NAME,
    )


def default_registry(home: Path | None = None) -> ServiceRegistry:
    """Build the registry of the default managed services.

    Args:
        home: Home directory to resolve install paths against. Defaults to
            the current user's home directory.

    Returns:
        Registry of engram, synapse, cortex and wilson, in that order.
    """
    base = home if home is not None else get_home_dir()
    return ServiceRegistry(
        _build_descriptor(name, display_name, port, base)
        for name, display_name, port in _DEFAULT_SERVICES
    )


def log_sources(registry: ServiceRegistry) -> list[str]:
    """Return every valid source name for ``wilson-ctl logs``."""
    return [*registry.names(), SUPERVISOR_LOG_SOURCE]

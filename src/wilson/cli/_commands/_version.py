"""wilson-ctl version - package and installed service versions."""

from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter

from wilson import __version__
from wilson.supervisor import read_current_version

from ._context import CLIContext
from ._shared import get_console, print_json
from ._status import NOT_INSTALLED

if TYPE_CHECKING:
    from wilson.services import ServiceDescriptor, ServiceRegistry

app = App(name="version", help="Show version", help_on_error=True)


def _version_key(descriptor: "ServiceDescriptor") -> str:
    if descriptor.is_supervisor:
        return f"{descriptor.name}-installed"
    return descriptor.name


def collect_versions(registry: "ServiceRegistry") -> dict[str, str]:
    """Collect the package version and each service's recorded version.

    The supervisor's own installed version is reported as
    ``wilson-installed`` so it cannot be confused with the running package.
    """
    versions = {"wilson": __version__}
    for descriptor in registry:
        installed = read_current_version(descriptor)
        versions[_version_key(descriptor)] = installed or NOT_INSTALLED
    return versions


@app.default
def version(
    *,
    json_output: Annotated[
        bool, Parameter(name="--json", help="Machine-readable JSON output")
    ] = False,
) -> None:
    """Show the wilson-ctl version and every service's installed version."""
    ctx = CLIContext.get_current()
    versions = collect_versions(ctx.registry)

    if json_output:
        print_json(versions)
        return

    console = get_console()
    console.print(f"\n{'Wilson:':<10}{versions['wilson']}", markup=False)
    for descriptor in ctx.registry:
        label = f"{descriptor.display_name}:"
        if descriptor.is_supervisor:
            label = f"{descriptor.display_name} (installed):"
        value = versions[_version_key(descriptor)]
        console.print(f"{label:<10}{value}", markup=False)
    console.print()

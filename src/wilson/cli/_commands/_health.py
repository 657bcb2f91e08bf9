"""wilson-ctl health - query every service's health endpoint."""

from typing import TYPE_CHECKING, Annotated, Any

import anyio
from cyclopts import App, Parameter

from wilson.supervisor import HealthStatus, build_probe

from ._context import CLIContext
from ._shared import get_console, print_json

if TYPE_CHECKING:
    from wilson.services import ServiceDescriptor, ServiceRegistry
    from wilson.supervisor import HealthProbe, HealthResult

app = App(
    name="health",
    help="Check health endpoints for all services",
    help_on_error=True,
)


async def collect_health(
    registry: "ServiceRegistry", probe: "HealthProbe"
) -> list[tuple["ServiceDescriptor", "HealthResult"]]:
    """Probe every service concurrently, returning results in registry order."""
    results: dict[str, HealthResult] = {}

    async def _probe(descriptor: "ServiceDescriptor") -> None:
        results[descriptor.name] = await probe.probe(descriptor)

    async with anyio.create_task_group() as tg:
        for descriptor in registry:
            tg.start_soon(_probe, descriptor)

    return [(descriptor, results[descriptor.name]) for descriptor in registry]


def health_to_dict(
    descriptor: "ServiceDescriptor", result: "HealthResult"
) -> dict[str, Any]:
    """Convert one health result to its JSON representation."""
    return {
        "name": descriptor.name,
        "port": descriptor.port,
        "status": result.status.value,
        "reachable": result.status != HealthStatus.UNREACHABLE,
        "version": result.version,
        "error": result.message,
        "data": result.payload,
    }


@app.default
def health(
    *,
    json_output: Annotated[
        bool, Parameter(name="--json", help="Machine-readable JSON output")
    ] = False,
) -> None:
    """Check health endpoints for all services."""
    ctx = CLIContext.get_current()
    probe = build_probe(ctx.config, logger=ctx.logger)
    results = anyio.run(collect_health, ctx.registry, probe)

    if json_output:
        print_json([health_to_dict(d, r) for d, r in results])
        return

    console = get_console()
    for descriptor, result in results:
        header = f"=== {descriptor.name} (port {descriptor.port}) ==="
        console.print(f"\n{header}", markup=False)
        if result.status == HealthStatus.UNREACHABLE:
            console.print(f"  Status: not reachable ({result.message})", markup=False)
            continue
        console.print(f"  Status: {result.status.value}", markup=False)
        if result.version:
            console.print(f"  Version: {result.version}", markup=False)
        if result.status == HealthStatus.DEGRADED and result.message:
            console.print(f"  Detail: {result.message}", markup=False)
    console.print()

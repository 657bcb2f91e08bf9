"""wilson-ctl status - process-level view of every managed service."""

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Annotated

import anyio
from cyclopts import App, Parameter
from rich.table import Table

from wilson.supervisor import HealthStatus, build_probe, read_current_version

from ._context import CLIContext
from ._shared import get_console, print_json

if TYPE_CHECKING:
    from wilson.services import ServiceDescriptor, ServiceRegistry
    from wilson.supervisor import HealthProbe

NOT_INSTALLED = "not installed"

app = App(
    name="status",
    help="Show all services (running/stopped, PID, port, version)",
    help_on_error=True,
)


@dataclass(frozen=True, slots=True)
class ServiceStatusRow:
    """One row of the status table."""

    name: str
    status: str
    version: str
    port: int | None
    pid: int | None


def read_pid(descriptor: "ServiceDescriptor") -> int | None:
    """Read the daemon pid from ``<config_dir>/<name>.pid``, if present."""
    try:
        raw = descriptor.pid_file.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def check_service(
    descriptor: "ServiceDescriptor", probe: "HealthProbe"
) -> ServiceStatusRow:
    """Build the status row for one service."""
    installed = read_current_version(descriptor) or NOT_INSTALLED
    result = await probe.probe(descriptor)

    if result.status == HealthStatus.UNREACHABLE:
        return ServiceStatusRow(
            name=descriptor.name,
            status="stopped" if descriptor.cli_path.exists() else "unreachable",
            version=installed,
            port=None,
            pid=None,
        )

    return ServiceStatusRow(
        name=descriptor.name,
        status="running",
        version=result.version or installed,
        port=descriptor.port,
        pid=read_pid(descriptor),
    )


async def collect_status(
    registry: "ServiceRegistry", probe: "HealthProbe"
) -> list[ServiceStatusRow]:
    """Check every service concurrently, returning rows in registry order."""
    rows: dict[str, ServiceStatusRow] = {}

    async def _check(descriptor: "ServiceDescriptor") -> None:
        rows[descriptor.name] = await check_service(descriptor, probe)

    async with anyio.create_task_group() as tg:
        for descriptor in registry:
            tg.start_soon(_check, descriptor)

    return [rows[name] for name in registry.names()]


def render_status(rows: list[ServiceStatusRow]) -> Table:
    """Render status rows as a rich table."""
    table = Table(show_edge=False, box=None, pad_edge=False)
    for column in ("Service", "Status", "Version", "Port", "PID"):
        table.add_column(column)
    for row in rows:
        table.add_row(
            row.name,
            row.status,
            row.version,
            str(row.port) if row.port else "-",
            str(row.pid) if row.pid else "-",
        )
    return table


@app.default
def status(
    *,
    json_output: Annotated[
        bool, Parameter(name="--json", help="Machine-readable JSON output")
    ] = False,
) -> None:
    """Show all services (running/stopped, PID, port, version)."""
    ctx = CLIContext.get_current()
    probe = build_probe(ctx.config, logger=ctx.logger)
    rows = anyio.run(collect_status, ctx.registry, probe)

    if json_output:
        print_json([asdict(row) for row in rows])
        return

    get_console().print(render_status(rows))

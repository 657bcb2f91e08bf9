"""wilson-ctl logs - tail a service or supervisor log."""

from collections import deque
from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter

from wilson.exceptions import UnknownServiceError
from wilson.services import SUPERVISOR_LOG_SOURCE, log_sources

from ._context import CLIContext
from ._shared import ExitCode, exit_with_error, get_console, print_json

if TYPE_CHECKING:
    from pathlib import Path

    from wilson.config import Config
    from wilson.services import ServiceRegistry

DEFAULT_LINE_COUNT = 20

app = App(name="logs", help="Show last n log lines (default: 20)", help_on_error=True)


def resolve_log_file(
    registry: "ServiceRegistry", config: "Config", source: str
) -> "Path":
    """Resolve a log source name to its file.

    Raises:
        UnknownServiceError: If the source is neither a service nor
            ``supervisor``.
    """
    if source == SUPERVISOR_LOG_SOURCE:
        return config.logging.resolved_file()
    return registry.by_name(source).log_file


def tail_lines(path: "Path", count: int) -> list[str]:
    """Return the last ``count`` lines of a file (empty if missing)."""
    if count <= 0:
        return []
    try:
        with path.open(encoding="utf-8", errors="replace") as f:
            return [line.rstrip("\n") for line in deque(f, maxlen=count)]
    except FileNotFoundError:
        return []


@app.default
def logs(
    source: Annotated[str, Parameter(help="Service name or 'supervisor'")],
    count: Annotated[int, Parameter(help="Number of lines")] = DEFAULT_LINE_COUNT,
    /,
    *,
    json_output: Annotated[
        bool, Parameter(name="--json", help="Machine-readable JSON output")
    ] = False,
) -> None:
    """Show the last lines of a service or supervisor log."""
    ctx = CLIContext.get_current()
    try:
        log_file = resolve_log_file(ctx.registry, ctx.config, source)
    except UnknownServiceError as e:
        exit_with_error(
            f"{e}. Sources: {', '.join(log_sources(ctx.registry))}",
            ExitCode.NOT_FOUND,
        )

    lines = tail_lines(log_file, count)

    if json_output:
        print_json({"source": source, "file": str(log_file), "lines": lines})
        return

    console = get_console()
    if not lines:
        console.print(f"No {source} logs found.", markup=False)
        return
    for line in lines:
        console.print(line, markup=False, soft_wrap=True)

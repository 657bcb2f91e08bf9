"""wilson-ctl update - run an update check now."""

from typing import TYPE_CHECKING, Annotated, Any

import anyio
from cyclopts import App, Parameter

from wilson.exceptions import UnknownServiceError
from wilson.supervisor import build_control, build_updater, load_token

from ._context import CLIContext
from ._shared import ExitCode, exit_with_error, get_console, print_json

if TYPE_CHECKING:
    from collections.abc import Sequence

    from wilson.services import ServiceDescriptor
    from wilson.supervisor import UpdateChecker, UpdateOutcome

app = App(
    name="update",
    help="Run update check (all or specific service)",
    help_on_error=True,
)


async def run_updates(
    descriptors: "Sequence[ServiceDescriptor]",
    updater: "UpdateChecker",
    token: str | None,
) -> list[tuple["ServiceDescriptor", "UpdateOutcome"]]:
    """Check each service in order, one at a time."""
    return [
        (descriptor, await updater.check(descriptor, token))
        for descriptor in descriptors
    ]


def outcome_to_dict(
    descriptor: "ServiceDescriptor", outcome: "UpdateOutcome"
) -> dict[str, Any]:
    """Convert one update outcome to its JSON representation."""
    return {
        "service": descriptor.name,
        "updated": outcome.updated,
        "from": outcome.from_version,
        "to": outcome.to_version,
        "error": outcome.error,
        "error_kind": outcome.error_kind.value if outcome.error_kind else None,
    }


def describe_outcome(outcome: "UpdateOutcome") -> str:
    """Describe an update outcome in one line."""
    if outcome.updated:
        return f"updated {outcome.from_version or 'unknown'} -> {outcome.to_version}"
    if outcome.error is not None:
        return f"failed: {outcome.error}"
    return f"up to date ({outcome.to_version or 'unknown'})"


@app.default
def update(
    service: Annotated[str | None, Parameter(help="Service to update")] = None,
    /,
    *,
    json_output: Annotated[
        bool, Parameter(name="--json", help="Machine-readable JSON output")
    ] = False,
) -> None:
    """Run update check (all or specific service)."""
    ctx = CLIContext.get_current()
    if service is None:
        descriptors = list(ctx.registry)
    else:
        try:
            descriptors = [ctx.registry.by_name(service)]
        except UnknownServiceError as e:
            exit_with_error(
                f"{e}. Services: {', '.join(ctx.registry.names())}",
                ExitCode.NOT_FOUND,
            )

    control = build_control(ctx.config, logger=ctx.logger)
    updater = build_updater(ctx.config, control, logger=ctx.logger)
    results = anyio.run(run_updates, descriptors, updater, load_token(ctx.config))

    if json_output:
        print_json([outcome_to_dict(d, o) for d, o in results])
    else:
        console = get_console()
        for descriptor, outcome in results:
            line = f"{descriptor.name}: {describe_outcome(outcome)}"
            console.print(line, markup=False)

    if any(outcome.error is not None for _, outcome in results):
        raise SystemExit(ExitCode.FAILURE)

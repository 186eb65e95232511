"""List services."""

import typer

from swarm_client.app_context import use_context
from swarm_client.commands.filters import parse_filters
from swarm_client.models import ServicesListParameters


def services(
    ctx: typer.Context,
    filter_: list[str] | None = typer.Option(None, "--filter", "-f", help="Filter as key=value (repeatable)"),
) -> None:
    """List services."""
    app = use_context(ctx)
    params = ServicesListParameters(filters=parse_filters(app, filter_))
    result = app.run(lambda client: client.list_services(params))
    app.out.print_services(result)

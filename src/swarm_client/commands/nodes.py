"""List swarm nodes."""

import typer

from swarm_client.app_context import use_context
from swarm_client.commands.filters import parse_filters
from swarm_client.models import NodesListParameters


def nodes(
    ctx: typer.Context,
    filter_: list[str] | None = typer.Option(None, "--filter", "-f", help="Filter as key=value (repeatable)"),
) -> None:
    """List swarm nodes."""
    app = use_context(ctx)
    params = NodesListParameters(filters=parse_filters(app, filter_))
    result = app.run(lambda client: client.list_nodes(params))
    app.out.print_nodes(result)

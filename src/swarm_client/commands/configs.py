"""List config objects."""

import typer

from swarm_client.app_context import use_context
from swarm_client.commands.filters import parse_filters
from swarm_client.models import ConfigsListParameters


def configs(
    ctx: typer.Context,
    filter_: list[str] | None = typer.Option(None, "--filter", "-f", help="Filter as key=value (repeatable)"),
) -> None:
    """List config objects."""
    app = use_context(ctx)
    params = ConfigsListParameters(filters=parse_filters(app, filter_))
    result = app.run(lambda client: client.list_configs(params))
    app.out.print_configs(result)

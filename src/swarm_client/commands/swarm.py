"""Inspect the swarm."""

import typer

from swarm_client.app_context import use_context


def swarm(ctx: typer.Context) -> None:
    """Show the swarm this node belongs to."""
    app = use_context(ctx)
    result = app.run(lambda client: client.inspect_swarm())
    app.out.print_swarm(result)

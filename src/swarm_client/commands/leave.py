"""Leave the swarm."""

import typer

from swarm_client.app_context import use_context
from swarm_client.models import SwarmLeaveParameters


def leave(
    ctx: typer.Context,
    *,
    force: bool = typer.Option(default=False, help="Leave even if this is the last manager"),
) -> None:
    """Leave the swarm."""
    app = use_context(ctx)
    params = SwarmLeaveParameters(force=force or None)
    app.run(lambda client: client.leave_swarm(params))
    app.out.print_left()

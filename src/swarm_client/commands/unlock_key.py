"""Show the manager unlock key."""

import typer

from swarm_client.app_context import use_context


def unlock_key(ctx: typer.Context) -> None:
    """Show the key unlocking an auto-locked manager."""
    app = use_context(ctx)
    result = app.run(lambda client: client.get_swarm_unlock_key())
    app.out.print_unlock_key(result.unlock_key)

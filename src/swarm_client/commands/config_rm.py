"""Remove a config object."""

import typer

from swarm_client.app_context import use_context


def config_rm(ctx: typer.Context, config_id: str) -> None:
    """Remove a config object."""
    app = use_context(ctx)
    app.run(lambda client: client.remove_config(config_id))
    app.out.print_config_removed(config_id)

"""Remove a node."""

import typer

from swarm_client.app_context import use_context


def node_rm(
    ctx: typer.Context,
    node_id: str,
    *,
    force: bool = typer.Option(default=False, help="Remove even if the node is not down"),
) -> None:
    """Remove a node from the swarm."""
    app = use_context(ctx)
    app.run(lambda client: client.remove_node(node_id, force=force))
    app.out.print_node_removed(node_id)

"""Remove a service."""

import typer

from swarm_client.app_context import use_context


def service_rm(ctx: typer.Context, service_id: str) -> None:
    """Remove a service."""
    app = use_context(ctx)
    app.run(lambda client: client.remove_service(service_id))
    app.out.print_service_removed(service_id)

"""Create a config object from a file."""

from pathlib import Path

import typer

from swarm_client.app_context import use_context
from swarm_client.commands.filters import parse_labels
from swarm_client.models import ConfigSpec, SwarmCreateConfigParameters


def config_create(
    ctx: typer.Context,
    name: str,
    file: Path = typer.Argument(help="File with the config content ('-' for stdin)"),
    label: list[str] | None = typer.Option(None, "--label", "-l", help="Label as key=value (repeatable)"),
) -> None:
    """Create a config object from a file."""
    app = use_context(ctx)
    content = typer.get_binary_stream("stdin").read() if str(file) == "-" else file.read_bytes()
    spec = ConfigSpec.from_bytes(name, content, labels=parse_labels(app, label))
    result = app.run(lambda client: client.create_config(SwarmCreateConfigParameters(config=spec)))
    app.out.print_config_created(result.id, name)

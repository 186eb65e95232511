"""CLI entry point for swarm-client."""

from pathlib import Path
from typing import Annotated

import typer
from mm_clikit import TyperPlus
from pydantic import ValidationError

from swarm_client.app_context import AppContext
from swarm_client.commands.config_create import config_create
from swarm_client.commands.config_rm import config_rm
from swarm_client.commands.configs import configs
from swarm_client.commands.leave import leave
from swarm_client.commands.logs import logs
from swarm_client.commands.node_rm import node_rm
from swarm_client.commands.nodes import nodes
from swarm_client.commands.service_rm import service_rm
from swarm_client.commands.services import services
from swarm_client.commands.swarm import swarm
from swarm_client.commands.unlock_key import unlock_key
from swarm_client.config import Config
from swarm_client.log import setup_logging
from swarm_client.output import Output

app = TyperPlus(package_name="swarm-client")


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    json_output: Annotated[bool, typer.Option("--json", help="Output results as JSON.")] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path.")] = None,
    host: Annotated[str | None, typer.Option("--host", "-H", help="Engine endpoint (unix://, tcp://, http://).")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Also log requests to stderr.")] = False,
) -> None:
    """Manage a container engine swarm: nodes, services, configs and logs."""
    out = Output(json_mode=json_output)
    try:
        cfg = Config.build(data_dir, host)
    except ValidationError as e:
        out.print_error_and_exit("invalid_config", str(e))
    cfg.data_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(cfg.log_path, verbose=verbose)
    ctx.obj = AppContext(out=out, cfg=cfg)


# Swarm
app.command()(swarm)
app.command("unlock-key")(unlock_key)
app.command()(leave)

# Nodes
app.command(aliases=["n"])(nodes)
app.command("node-rm")(node_rm)

# Services
app.command(aliases=["s"])(services)
app.command("service-rm")(service_rm)
app.command()(logs)

# Configs
app.command(aliases=["c"])(configs)
app.command("config-create")(config_create)
app.command("config-rm")(config_rm)

"""Fetch service logs."""

import asyncio

import typer
from pydantic import ValidationError

from swarm_client.app_context import use_context
from swarm_client.client import SwarmClient
from swarm_client.models import ServiceLogsParameters
from swarm_client.output import Output
from swarm_client.stream.demux import OutputStream, RawStream


async def _drain(out: Output, name: str, stream: OutputStream | RawStream) -> None:
    async for chunk in stream:
        out.print_log_chunk(name, chunk)


def logs(
    ctx: typer.Context,
    service: str,
    *,
    follow: bool = typer.Option(False, "--follow", "-f", help="Keep streaming new output"),
    tail: str | None = typer.Option(None, help="Number of lines from the end, or 'all'"),
    since: str | None = typer.Option(None, help="Only logs after this unix timestamp or RFC 3339 date"),
    timestamps: bool = typer.Option(default=False, help="Prefix lines with timestamps"),
    tty: bool = typer.Option(default=False, help="Service was created with a TTY (output is not multiplexed)"),
) -> None:
    """Fetch stdout/stderr logs of all tasks of a service."""
    app = use_context(ctx)
    try:
        params = ServiceLogsParameters(
            stdout=True, stderr=True, follow=follow or None, tail=tail, since=since, timestamps=timestamps or None
        )
    except ValidationError as e:
        app.out.print_error_and_exit("invalid_option", str(e))

    async def action(client: SwarmClient) -> None:
        stream = await client.get_service_logs(service, params, tty=tty)
        async with stream:
            if isinstance(stream, RawStream):
                await _drain(app.out, "stdout", stream)
            else:
                await asyncio.gather(
                    _drain(app.out, "stdout", stream.primary), _drain(app.out, "stderr", stream.secondary)
                )

    app.run(action)

"""Application context shared across CLI commands."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import typer

from swarm_client.client import SwarmClient
from swarm_client.config import Config
from swarm_client.errors import SwarmClientError
from swarm_client.output import Output

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared application state passed through Typer context."""

    out: Output
    cfg: Config

    def run(self, action: Callable[[SwarmClient], Awaitable[T]]) -> T:
        """Run an async action against a fresh client; client and argument errors exit with an error envelope."""

        async def main() -> T:
            async with SwarmClient(self.cfg) as client:
                return await action(client)

        try:
            return asyncio.run(main())
        except SwarmClientError as e:
            self.out.print_error_and_exit(e.code, str(e))
        except ValueError as e:
            self.out.print_error_and_exit("invalid_option", str(e))


def use_context(ctx: typer.Context) -> AppContext:
    """Extract application context from Typer context."""
    result: AppContext = ctx.obj
    return result

"""Structured output for CLI and JSON modes."""

# ruff: noqa: T201 -- this module is the output layer; print() is its sole mechanism for producing CLI output.

import json
import sys
from typing import NoReturn

import typer
from pydantic import BaseModel

from swarm_client.models import NodeListResponse, SwarmConfig, SwarmInspectResponse, SwarmService


def _dump(model: BaseModel) -> dict[str, object]:
    return model.model_dump(by_alias=True, exclude_none=True, mode="json")


class Output:
    """Handles all CLI output in JSON or human-readable format."""

    def __init__(self, *, json_mode: bool) -> None:
        """Initialize output handler.

        Args:
            json_mode: If True, output JSON envelopes; otherwise human-readable text.

        """
        self._json_mode = json_mode

    def _success(self, data: object, message: str) -> None:
        """Print a success result in JSON or human-readable format."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": data}))
        else:
            print(message)

    def print_error_and_exit(self, code: str, message: str) -> NoReturn:
        """Print an error in JSON or human-readable format and exit with code 1.

        Raises:
            typer.Exit: Always, with code 1.

        """
        if self._json_mode:
            print(json.dumps({"ok": False, "error": code, "message": message}))
        else:
            print(f"Error: {message}", file=sys.stderr)
        raise typer.Exit(code=1)

    # --- Swarm ---

    def print_swarm(self, swarm: SwarmInspectResponse) -> None:
        """Print swarm summary."""
        name = swarm.spec.name if swarm.spec else None
        index = swarm.version.index if swarm.version else None
        self._success(_dump(swarm), f"Swarm {swarm.id} (name: {name}, version: {index}, created: {swarm.created_at})")

    def print_unlock_key(self, key: str | None) -> None:
        """Print the manager unlock key."""
        self._success({"unlock_key": key}, key or "Autolock is not enabled.")

    def print_left(self) -> None:
        """Print swarm leave confirmation."""
        self._success({}, "Node left the swarm.")

    # --- Nodes ---

    def print_nodes(self, nodes: list[NodeListResponse]) -> None:
        """Print node table."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": {"nodes": [_dump(n) for n in nodes]}}))
            return
        for node in nodes:
            hostname = (node.description or {}).get("Hostname", "")
            state = (node.status or {}).get("State", "")
            availability = node.spec.availability if node.spec else ""
            role = node.spec.role if node.spec else ""
            print(f"{node.id}  {hostname}  {state}  {availability}  {role}")

    def print_node_removed(self, node_id: str) -> None:
        """Print node removal confirmation."""
        self._success({"id": node_id}, f"Node '{node_id}' removed.")

    # --- Services ---

    def print_services(self, services: list[SwarmService]) -> None:
        """Print service table."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": {"services": [_dump(s) for s in services]}}))
            return
        for service in services:
            name = service.spec.name if service.spec else ""
            mode = ", ".join((service.spec.mode or {}).keys()) if service.spec else ""
            print(f"{service.id}  {name}  {mode}")

    def print_service_removed(self, service_id: str) -> None:
        """Print service removal confirmation."""
        self._success({"id": service_id}, f"Service '{service_id}' removed.")

    def print_log_chunk(self, stream: str, chunk: bytes) -> None:
        """Write a log chunk to the matching terminal stream, or as a JSON line."""
        if self._json_mode:
            print(json.dumps({"stream": stream, "data": chunk.decode("utf-8", errors="replace")}), flush=True)
            return
        target = sys.stderr if stream == "stderr" else sys.stdout
        target.buffer.write(chunk)
        target.flush()

    # --- Configs ---

    def print_configs(self, configs: list[SwarmConfig]) -> None:
        """Print config table."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": {"configs": [_dump(c) for c in configs]}}))
            return
        for config in configs:
            name = config.spec.name if config.spec else ""
            print(f"{config.id}  {name}  {config.created_at}")

    def print_config_created(self, config_id: str | None, name: str) -> None:
        """Print config creation confirmation."""
        self._success({"id": config_id, "name": name}, f"Config '{name}' created: {config_id}")

    def print_config_removed(self, config_id: str) -> None:
        """Print config removal confirmation."""
        self._success({"id": config_id}, f"Config '{config_id}' removed.")

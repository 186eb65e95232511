"""Asynchronous swarm API client.

Every public method is a thin entry over the operation table: build the
request, send it through the transport, interpret the response.
"""

import logging
from collections.abc import Callable
from types import TracebackType
from typing import Any, Self

from pydantic import BaseModel

from swarm_client.api import operations as ops
from swarm_client.api.operations import Operation
from swarm_client.api.request import build_request
from swarm_client.api.response import interpret, open_stream
from swarm_client.api.transport import HttpxTransport, Transport
from swarm_client.config import Config
from swarm_client.models import (
    ApiResponse,
    ConfigsListParameters,
    NodeListResponse,
    NodesListParameters,
    NodeUpdateParameters,
    ServiceCreateParameters,
    ServiceCreateResponse,
    ServiceLogsParameters,
    ServicesListParameters,
    ServiceUpdateParameters,
    ServiceUpdateResponse,
    SwarmConfig,
    SwarmCreateConfigParameters,
    SwarmCreateConfigResponse,
    SwarmInitParameters,
    SwarmInspectResponse,
    SwarmJoinParameters,
    SwarmLeaveParameters,
    SwarmService,
    SwarmUnlockParameters,
    SwarmUnlockResponse,
    SwarmUpdateConfigParameters,
    SwarmUpdateParameters,
)
from swarm_client.stream.demux import DemuxedStreams, RawStream
from swarm_client.stream.frame import Frame

logger = logging.getLogger(__name__)


class SwarmClient:
    """Client for the engine's swarm, service, node and config endpoints."""

    def __init__(self, cfg: Config, transport: Transport | None = None) -> None:
        """Initialize the client.

        Args:
            cfg: Client configuration (endpoint, API version, timeouts).
            transport: Transport to send requests through. Defaults to an httpx transport built from cfg.

        """
        self._cfg = cfg
        self._owns_transport = transport is None
        if transport is None:
            socket_path = str(cfg.socket_path) if cfg.socket_path is not None else None
            transport = HttpxTransport(cfg.base_url, socket_path=socket_path, timeout=cfg.timeout)
        self._transport = transport

    async def call(
        self,
        operation: Operation,
        *,
        path_params: dict[str, object] | None = None,
        params: BaseModel | None = None,
        query: dict[str, object] | None = None,
    ) -> Any:
        """Run a buffered operation and return its decoded result."""
        request = build_request(operation, path_params=path_params, params=params, query=query)
        response = await self._transport.send(request)
        body = await response.read()
        return interpret(operation, response.status_code, response.headers, body)

    async def stream(
        self,
        operation: Operation,
        *,
        tty: bool,
        path_params: dict[str, object] | None = None,
        params: BaseModel | None = None,
        system_sink: Callable[[Frame], None] | None = None,
    ) -> RawStream | DemuxedStreams:
        """Run a streaming operation and return its body as a raw or demultiplexed stream."""
        request = build_request(operation, path_params=path_params, params=params)
        response = await self._transport.send(request)
        logger.debug("Opening %s stream (status %d, tty=%s)", operation.name, response.status_code, tty)
        return await open_stream(
            operation, response, tty=tty, max_pending=self._cfg.stream_buffer, system_sink=system_sink
        )

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        await self.aclose()

    # --- Swarm ---

    async def get_swarm_unlock_key(self) -> SwarmUnlockResponse:
        """Get the key unlocking an auto-locked manager."""
        result: SwarmUnlockResponse = await self.call(ops.GET_SWARM_UNLOCK_KEY)
        return result

    async def init_swarm(self, params: SwarmInitParameters) -> str:
        """Initialize a new swarm and return this node's ID."""
        node_id: str = await self.call(ops.INIT_SWARM, params=params)
        return node_id

    async def inspect_swarm(self) -> SwarmInspectResponse:
        """Inspect the swarm this node belongs to."""
        result: SwarmInspectResponse = await self.call(ops.INSPECT_SWARM)
        return result

    async def join_swarm(self, params: SwarmJoinParameters) -> None:
        """Join an existing swarm."""
        await self.call(ops.JOIN_SWARM, params=params)

    async def leave_swarm(self, params: SwarmLeaveParameters | None = None) -> None:
        """Leave the swarm (``force`` is required for the last manager)."""
        await self.call(ops.LEAVE_SWARM, params=params)

    async def unlock_swarm(self, params: SwarmUnlockParameters) -> None:
        """Unlock a locked manager."""
        await self.call(ops.UNLOCK_SWARM, params=params)

    async def update_swarm(self, params: SwarmUpdateParameters) -> None:
        """Update the swarm spec, optionally rotating join tokens or the unlock key."""
        await self.call(ops.UPDATE_SWARM, params=params)

    # --- Services ---

    async def create_service(self, params: ServiceCreateParameters) -> ServiceCreateResponse:
        """Create a service."""
        result: ServiceCreateResponse = await self.call(ops.CREATE_SERVICE, params=params)
        return result

    async def inspect_service(self, id_: str) -> SwarmService:
        """Inspect a service by ID or name."""
        result: SwarmService = await self.call(ops.INSPECT_SERVICE, path_params={"id": id_})
        return result

    async def list_services(self, params: ServicesListParameters | None = None) -> list[SwarmService]:
        """List services, optionally filtered."""
        result: list[SwarmService] = await self.call(ops.LIST_SERVICES, params=params)
        return result

    async def update_service(self, id_: str, params: ServiceUpdateParameters) -> ServiceUpdateResponse:
        """Update a service. Spec fields left unset are not sent."""
        result: ServiceUpdateResponse = await self.call(ops.UPDATE_SERVICE, path_params={"id": id_}, params=params)
        return result

    async def remove_service(self, id_: str) -> None:
        """Delete a service."""
        await self.call(ops.REMOVE_SERVICE, path_params={"id": id_})

    async def get_service_logs(
        self,
        id_: str,
        params: ServiceLogsParameters,
        *,
        tty: bool = False,
        system_sink: Callable[[Frame], None] | None = None,
    ) -> RawStream | DemuxedStreams:
        """Get stdout/stderr logs from all tasks of a service.

        Only works for services using the json-file or journald logging driver.

        Args:
            id_: ID or name of the service.
            params: Log selection (streams, follow, since/until, tail, timestamps).
            tty: Whether the service was created with a TTY. Without one the body is
                multiplexed and is returned as DemuxedStreams; with one it is a RawStream.
            system_sink: Callback receiving stdin/system frames of a multiplexed stream.

        """
        return await self.stream(
            ops.GET_SERVICE_LOGS, tty=tty, path_params={"id": id_}, params=params, system_sink=system_sink
        )

    # --- Nodes ---

    async def list_nodes(self, params: NodesListParameters | None = None) -> list[NodeListResponse]:
        """List swarm nodes, optionally filtered."""
        result: list[NodeListResponse] = await self.call(ops.LIST_NODES, params=params)
        return result

    async def inspect_node(self, id_: str) -> NodeListResponse:
        """Inspect a node by ID or name."""
        result: NodeListResponse = await self.call(ops.INSPECT_NODE, path_params={"id": id_})
        return result

    async def remove_node(self, id_: str, *, force: bool = False) -> None:
        """Remove a node from the swarm."""
        await self.call(ops.REMOVE_NODE, path_params={"id": id_}, query={"force": force or None})

    async def update_node(self, id_: str, version: int, params: NodeUpdateParameters) -> None:
        """Update a node's spec. ``version`` must match the node's current version index."""
        if version < 0:
            raise ValueError("version must be non-negative.")
        await self.call(ops.UPDATE_NODE, path_params={"id": id_}, params=params, query={"version": version})

    # --- Configs ---

    async def create_config(self, params: SwarmCreateConfigParameters) -> SwarmCreateConfigResponse:
        """Create a config object."""
        result: SwarmCreateConfigResponse = await self.call(ops.CREATE_CONFIG, params=params)
        return result

    async def inspect_config(self, id_: str) -> SwarmConfig:
        """Inspect a config by ID or name."""
        result: SwarmConfig = await self.call(ops.INSPECT_CONFIG, path_params={"id": id_})
        return result

    async def list_configs(self, params: ConfigsListParameters | None = None) -> list[SwarmConfig]:
        """List config objects, optionally filtered."""
        result: list[SwarmConfig] = await self.call(ops.LIST_CONFIGS, params=params)
        return result

    async def update_config(self, id_: str, params: SwarmUpdateConfigParameters) -> ApiResponse:
        """Update a config object (only labels can change)."""
        result: ApiResponse = await self.call(ops.UPDATE_CONFIG, path_params={"id": id_}, params=params)
        return result

    async def remove_config(self, id_: str) -> ApiResponse:
        """Delete a config object."""
        result: ApiResponse = await self.call(ops.REMOVE_CONFIG, path_params={"id": id_})
        return result

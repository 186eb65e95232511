"""Declarative table of swarm API operations.

Each entry carries everything the facade needs to issue a call: HTTP method,
path template, declared result type, and whether a 503 means "not a swarm
member". Results are decoded with a pydantic TypeAdapter of ``result``;
``None`` means the body is ignored.
"""

from dataclasses import dataclass
from typing import Any

from swarm_client.models import (
    ApiResponse,
    NodeListResponse,
    ServiceCreateResponse,
    ServiceUpdateResponse,
    SwarmConfig,
    SwarmCreateConfigResponse,
    SwarmInspectResponse,
    SwarmService,
    SwarmUnlockResponse,
)


@dataclass(frozen=True, slots=True)
class Operation:
    """One engine endpoint."""

    name: str
    method: str
    path: str
    result: Any = None
    swarm_scoped: bool = True
    streaming: bool = False


# Swarm
GET_SWARM_UNLOCK_KEY = Operation("swarm.unlockkey", "GET", "/swarm/unlockkey", SwarmUnlockResponse)
INIT_SWARM = Operation("swarm.init", "POST", "/swarm/init", str)
INSPECT_SWARM = Operation("swarm.inspect", "GET", "/swarm", SwarmInspectResponse)
JOIN_SWARM = Operation("swarm.join", "POST", "/swarm/join")
LEAVE_SWARM = Operation("swarm.leave", "POST", "/swarm/leave")
UNLOCK_SWARM = Operation("swarm.unlock", "POST", "/swarm/unlock")
UPDATE_SWARM = Operation("swarm.update", "POST", "/swarm/update")

# Services
CREATE_SERVICE = Operation("service.create", "POST", "/services/create", ServiceCreateResponse)
INSPECT_SERVICE = Operation("service.inspect", "GET", "/services/{id}", SwarmService)
LIST_SERVICES = Operation("service.list", "GET", "/services", list[SwarmService])
UPDATE_SERVICE = Operation("service.update", "POST", "/services/{id}/update", ServiceUpdateResponse)
REMOVE_SERVICE = Operation("service.remove", "DELETE", "/services/{id}")
GET_SERVICE_LOGS = Operation("service.logs", "GET", "/services/{id}/logs", streaming=True)

# Nodes
LIST_NODES = Operation("node.list", "GET", "/nodes", list[NodeListResponse])
INSPECT_NODE = Operation("node.inspect", "GET", "/nodes/{id}", NodeListResponse)
REMOVE_NODE = Operation("node.remove", "DELETE", "/nodes/{id}")
UPDATE_NODE = Operation("node.update", "POST", "/nodes/{id}/update")

# Configs
CREATE_CONFIG = Operation("config.create", "POST", "/configs/create", SwarmCreateConfigResponse)
INSPECT_CONFIG = Operation("config.inspect", "GET", "/configs/{id}", SwarmConfig)
LIST_CONFIGS = Operation("config.list", "GET", "/configs", list[SwarmConfig])
UPDATE_CONFIG = Operation("config.update", "POST", "/configs/{id}/update", ApiResponse)
REMOVE_CONFIG = Operation("config.remove", "DELETE", "/configs/{id}", ApiResponse)

OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        GET_SWARM_UNLOCK_KEY,
        INIT_SWARM,
        INSPECT_SWARM,
        JOIN_SWARM,
        LEAVE_SWARM,
        UNLOCK_SWARM,
        UPDATE_SWARM,
        CREATE_SERVICE,
        INSPECT_SERVICE,
        LIST_SERVICES,
        UPDATE_SERVICE,
        REMOVE_SERVICE,
        GET_SERVICE_LOGS,
        LIST_NODES,
        INSPECT_NODE,
        REMOVE_NODE,
        UPDATE_NODE,
        CREATE_CONFIG,
        INSPECT_CONFIG,
        LIST_CONFIGS,
        UPDATE_CONFIG,
        REMOVE_CONFIG,
    )
}

"""Parameter and result models for the swarm API.

Engine JSON objects use PascalCase keys; fields here are snake_case with
aliases generated to match. Result models keep unknown keys so newer engines
do not break decoding.
"""

import base64
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator
from pydantic.alias_generators import to_pascal

from swarm_client.api.fields import Body, Header, Query, QueryStyle

Filters = dict[str, list[str]]
Timestamp = Annotated[float, Field(ge=0)] | datetime


class ApiModel(BaseModel):
    """Engine JSON object."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="allow")


class Parameters(BaseModel):
    """Operation parameters. Field placement is declared with Query/Header/Body markers."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="forbid")


# --- Shared objects ---


class ObjectVersion(ApiModel):
    """Version of a swarm object, required for optimistic-concurrency updates."""

    index: int | None = None


class SwarmDriver(ApiModel):
    """Driver reference with options (e.g. config templating driver)."""

    name: str | None = None
    options: dict[str, str] | None = None


class AuthConfig(BaseModel):
    """Registry credentials, sent base64url-encoded in the X-Registry-Auth header."""

    model_config = ConfigDict(populate_by_name=True)

    username: str | None = None
    password: str | None = None
    auth: str | None = None
    email: str | None = None
    server_address: str | None = Field(default=None, alias="serveraddress")
    identity_token: str | None = Field(default=None, alias="identitytoken")
    registry_token: str | None = Field(default=None, alias="registrytoken")


# --- Swarm ---


class SwarmSpec(ApiModel):
    """User-modifiable swarm configuration."""

    name: str | None = None
    labels: dict[str, str] | None = None
    orchestration: dict[str, Any] | None = None
    raft: dict[str, Any] | None = None
    dispatcher: dict[str, Any] | None = None
    ca_config: dict[str, Any] | None = Field(default=None, alias="CAConfig")
    encryption_config: dict[str, Any] | None = None
    task_defaults: dict[str, Any] | None = None


class JoinTokens(ApiModel):
    """Tokens for joining the swarm as a worker or manager."""

    worker: str | None = None
    manager: str | None = None


class SwarmInspectResponse(ApiModel):
    """Swarm state as returned by GET /swarm."""

    id: str | None = Field(default=None, alias="ID")
    version: ObjectVersion | None = None
    created_at: str | None = None
    updated_at: str | None = None
    spec: SwarmSpec | None = None
    tls_info: dict[str, Any] | None = Field(default=None, alias="TLSInfo")
    root_rotation_in_progress: bool | None = None
    default_addr_pool: list[str] | None = None
    subnet_size: int | None = None
    data_path_port: int | None = None
    join_tokens: JoinTokens | None = None


class SwarmUnlockResponse(ApiModel):
    """Key unlocking an auto-locked manager."""

    unlock_key: str | None = None


class SwarmInitParameters(Parameters):
    """Body of POST /swarm/init."""

    listen_addr: str | None = None
    advertise_addr: str | None = None
    data_path_addr: str | None = None
    data_path_port: int | None = Field(default=None, ge=0, le=65535)
    default_addr_pool: list[str] | None = None
    force_new_cluster: bool | None = None
    subnet_size: int | None = Field(default=None, ge=0)
    spec: SwarmSpec | None = None
    auto_lock_managers: bool | None = None
    availability: Literal["active", "pause", "drain"] | None = None


class SwarmJoinParameters(Parameters):
    """Body of POST /swarm/join."""

    listen_addr: str | None = None
    advertise_addr: str | None = None
    data_path_addr: str | None = None
    remote_addrs: list[str] | None = None
    join_token: str | None = None
    availability: Literal["active", "pause", "drain"] | None = None


class SwarmLeaveParameters(Parameters):
    """Query of POST /swarm/leave."""

    force: Annotated[bool | None, Query("force")] = None


class SwarmUnlockParameters(Parameters):
    """Body of POST /swarm/unlock."""

    unlock_key: str


class SwarmUpdateParameters(Parameters):
    """POST /swarm/update: version and token rotation in the query, spec as body."""

    version: Annotated[NonNegativeInt, Query("version")]
    rotate_worker_token: Annotated[bool | None, Query("rotateWorkerToken")] = None
    rotate_manager_token: Annotated[bool | None, Query("rotateManagerToken")] = None
    rotate_manager_unlock_key: Annotated[bool | None, Query("rotateManagerUnlockKey")] = None
    spec: Annotated[SwarmSpec, Body()]


# --- Services ---


class ServiceSpec(ApiModel):
    """Desired state of a replicated workload."""

    name: str | None = None
    labels: dict[str, str] | None = None
    task_template: dict[str, Any] | None = None
    mode: dict[str, Any] | None = None
    update_config: dict[str, Any] | None = None
    rollback_config: dict[str, Any] | None = None
    networks: list[dict[str, Any]] | None = None
    endpoint_spec: dict[str, Any] | None = None


class SwarmService(ApiModel):
    """Service object as returned by inspect/list."""

    id: str | None = Field(default=None, alias="ID")
    version: ObjectVersion | None = None
    created_at: str | None = None
    updated_at: str | None = None
    spec: ServiceSpec | None = None
    previous_spec: ServiceSpec | None = None
    endpoint: dict[str, Any] | None = None
    update_status: dict[str, Any] | None = None
    service_status: dict[str, Any] | None = None


class ServiceCreateResponse(ApiModel):
    """Result of POST /services/create."""

    id: str | None = Field(default=None, alias="ID")
    warnings: list[str] | None = None


class ServiceUpdateResponse(ApiModel):
    """Result of POST /services/{id}/update."""

    warnings: list[str] | None = None


class ServiceCreateParameters(Parameters):
    """POST /services/create: spec as body, optional registry credentials header."""

    service: Annotated[ServiceSpec, Body()]
    registry_auth: Annotated[AuthConfig | None, Header("X-Registry-Auth")] = None


class ServiceUpdateParameters(Parameters):
    """POST /services/{id}/update. Unset spec fields are omitted from the body."""

    version: Annotated[NonNegativeInt, Query("version")]
    registry_auth_from: Annotated[Literal["spec", "previous-spec"] | None, Query("registryAuthFrom")] = None
    rollback: Annotated[Literal["previous"] | None, Query("rollback")] = None
    service: Annotated[ServiceSpec, Body()]
    registry_auth: Annotated[AuthConfig | None, Header("X-Registry-Auth")] = None


class ServicesListParameters(Parameters):
    """Query of GET /services."""

    filters: Annotated[Filters | None, Query("filters", QueryStyle.JSON)] = None
    status: Annotated[bool | None, Query("status")] = None


class ServiceLogsParameters(Parameters):
    """Query of GET /services/{id}/logs."""

    details: Annotated[bool | None, Query("details")] = None
    follow: Annotated[bool | None, Query("follow")] = None
    stdout: Annotated[bool | None, Query("stdout")] = None
    stderr: Annotated[bool | None, Query("stderr")] = None
    since: Annotated[Timestamp | None, Query("since")] = None
    until: Annotated[Timestamp | None, Query("until")] = None
    timestamps: Annotated[bool | None, Query("timestamps")] = None
    tail: Annotated[NonNegativeInt | Literal["all"] | None, Query("tail")] = None

    @model_validator(mode="after")
    def check_streams(self) -> Self:
        if self.stdout is False and self.stderr is False:
            raise ValueError("At least one of stdout or stderr must be requested.")
        return self


# --- Nodes ---


class NodeSpec(ApiModel):
    """User-modifiable node attributes."""

    name: str | None = None
    labels: dict[str, str] | None = None
    role: Literal["worker", "manager"] | None = None
    availability: Literal["active", "pause", "drain"] | None = None


class NodeListResponse(ApiModel):
    """Node object as returned by inspect/list."""

    id: str | None = Field(default=None, alias="ID")
    version: ObjectVersion | None = None
    created_at: str | None = None
    updated_at: str | None = None
    spec: NodeSpec | None = None
    description: dict[str, Any] | None = None
    status: dict[str, Any] | None = None
    manager_status: dict[str, Any] | None = None


class NodesListParameters(Parameters):
    """Query of GET /nodes."""

    filters: Annotated[Filters | None, Query("filters", QueryStyle.JSON)] = None


class NodeUpdateParameters(Parameters):
    """Body of POST /nodes/{id}/update. Unset fields are omitted."""

    name: str | None = None
    labels: dict[str, str] | None = None
    role: Literal["worker", "manager"] | None = None
    availability: Literal["active", "pause", "drain"] | None = None


# --- Configs ---


class ConfigSpec(ApiModel):
    """Config object contents. Data is base64-encoded."""

    name: str | None = None
    labels: dict[str, str] | None = None
    data: str | None = None
    templating: SwarmDriver | None = None

    @classmethod
    def from_bytes(cls, name: str, content: bytes, labels: dict[str, str] | None = None) -> Self:
        """Build a spec carrying raw content, base64-encoding it."""
        return cls(name=name, labels=labels, data=base64.b64encode(content).decode())

    def decoded_data(self) -> bytes:
        """Return the raw config content."""
        return base64.b64decode(self.data or "")


class SwarmConfig(ApiModel):
    """Config object as returned by inspect/list."""

    id: str | None = Field(default=None, alias="ID")
    version: ObjectVersion | None = None
    created_at: str | None = None
    updated_at: str | None = None
    spec: ConfigSpec | None = None


class SwarmCreateConfigResponse(ApiModel):
    """Result of POST /configs/create."""

    id: str | None = Field(default=None, alias="ID")


class SwarmCreateConfigParameters(Parameters):
    """Body of POST /configs/create."""

    config: Annotated[ConfigSpec, Body()]


class SwarmUpdateConfigParameters(Parameters):
    """POST /configs/{id}/update: version in the query, spec as body (only labels are mutable)."""

    version: Annotated[NonNegativeInt, Query("version")]
    config: Annotated[ConfigSpec, Body()]


class ConfigsListParameters(Parameters):
    """Query of GET /configs."""

    filters: Annotated[Filters | None, Query("filters", QueryStyle.JSON)] = None


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """Bare response for operations whose success carries no typed body."""

    status_code: int
    body: str = ""

"""Turn an operation plus typed parameters into an HTTP request descriptor.

Path parameters are percent-encoded one by one, query parameters follow the
per-field QueryStyle, and JSON bodies omit every field that has no value so
partial updates never clobber server-side state.
"""

import base64
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from urllib.parse import quote, urlencode

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from swarm_client.api.fields import Body, Header, Query, QueryStyle
from swarm_client.api.operations import Operation

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

JSON_CONTENT_TYPE = "application/json"
BINARY_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class HttpRequest:
    """Transport-independent description of one HTTP request."""

    method: str
    path: str
    query: tuple[tuple[str, str], ...] = ()
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None

    @property
    def target(self) -> str:
        """Path with the encoded query string, as sent on the request line."""
        if not self.query:
            return self.path
        return f"{self.path}?{urlencode(self.query)}"

    def url(self, base: str) -> str:
        """Absolute request URL: ``base`` (scheme, host and any version prefix) followed by the target."""
        return base.rstrip("/") + self.target


def encode_path(template: str, path_params: Mapping[str, object]) -> str:
    """Substitute ``{name}`` placeholders, percent-encoding each value on its own.

    Raises:
        ValueError: A placeholder has no value or an empty one.

    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        value = path_params.get(name)
        if value is None or str(value) == "":
            msg = f"Missing path parameter '{name}'."
            raise ValueError(msg)
        return quote(str(value), safe="")

    return _PLACEHOLDER.sub(substitute, template)


def encode_scalar(value: object) -> str:
    """Stringify a single query value the way the engine's form parser expects."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, datetime):
        return str(int(value.timestamp()))
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def encode_query(name: str, value: object, style: QueryStyle = QueryStyle.SCALAR) -> list[tuple[str, str]]:
    """Encode one query parameter into name/value pairs. Unset or empty values produce none."""
    if value is None:
        return []
    match style:
        case QueryStyle.SCALAR:
            return [(name, encode_scalar(value))]
        case QueryStyle.REPEAT:
            items = value if isinstance(value, list | tuple | set | frozenset) else [value]
            return [(name, encode_scalar(item)) for item in items]
        case QueryStyle.JSON:
            if not value:
                return []
            return [(name, json.dumps(_plain(value), separators=(",", ":")))]


def encode_header(value: object) -> str:
    """Encode a header value; objects become base64url JSON (X-Registry-Auth convention)."""
    if isinstance(value, str):
        return value
    raw = json.dumps(_plain(value)).encode()
    return base64.urlsafe_b64encode(raw).decode()


def dump_body(value: object) -> bytes | None:
    """Serialize a body value. Unset fields are dropped; an empty object is not sent."""
    if value is None:
        return None
    if isinstance(value, bytes):
        return value
    payload = _plain(value)
    if payload == {}:
        return None
    return json.dumps(payload).encode()


def split_parameters(params: BaseModel) -> tuple[list[tuple[str, str]], dict[str, str], object]:
    """Route each field of a parameter model to the query, headers, or body.

    Returns:
        Tuple of (query pairs, headers, body value or None).

    """
    query: list[tuple[str, str]] = []
    headers: dict[str, str] = {}
    body: object = None
    has_body_field = False
    unmarked: set[str] = set()

    for name, info in type(params).model_fields.items():
        value = getattr(params, name)
        match _marker(info):
            case Query(name=query_name, style=style):
                query.extend(encode_query(query_name, value, style))
            case Header(name=header_name):
                if value is not None:
                    headers[header_name] = encode_header(value)
            case Body():
                has_body_field = True
                body = value
            case _:
                unmarked.add(name)

    if not has_body_field and unmarked:
        body = params.model_dump(include=unmarked, by_alias=True, exclude_none=True, mode="json")
    return query, headers, body


def build_request(
    operation: Operation,
    *,
    path_params: Mapping[str, object] | None = None,
    params: BaseModel | None = None,
    query: Mapping[str, object] | None = None,
) -> HttpRequest:
    """Build the HTTP request for an operation.

    Args:
        operation: Endpoint description (method + path template).
        path_params: Values for the path template placeholders.
        params: Parameter model; its fields are routed by their Query/Header/Body markers.
        query: Extra scalar query parameters (e.g. ``version``, ``force``); None values are omitted.

    Raises:
        ValueError: A path parameter is missing or empty.

    """
    path = encode_path(operation.path, path_params or {})
    pairs: list[tuple[str, str]] = []
    headers: dict[str, str] = {}
    body_value: object = None
    if params is not None:
        pairs, headers, body_value = split_parameters(params)
    for name, value in (query or {}).items():
        pairs.extend(encode_query(name, value))

    body = dump_body(body_value)
    if body is not None:
        headers["Content-Type"] = BINARY_CONTENT_TYPE if isinstance(body_value, bytes) else JSON_CONTENT_TYPE
    return HttpRequest(method=operation.method, path=path, query=tuple(pairs), headers=headers, body=body)


def _marker(info: FieldInfo) -> Query | Header | Body | None:
    for item in info.metadata:
        if isinstance(item, Query | Header | Body):
            return item
    return None


def _plain(value: Any) -> Any:
    """Convert models (and containers of them) to JSON-ready data with unset fields removed."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True, mode="json")
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items() if v is not None}
    if isinstance(value, list | tuple):
        return [_plain(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value

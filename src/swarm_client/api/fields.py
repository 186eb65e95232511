"""Markers declaring where a parameter-model field travels in the HTTP request.

Used as ``typing.Annotated`` metadata on parameter models:

    follow: Annotated[bool | None, Query("follow")] = None
    filters: Annotated[dict[str, list[str]] | None, Query("filters", QueryStyle.JSON)] = None
    registry_auth: Annotated[AuthConfig | None, Header("X-Registry-Auth")] = None
    spec: Annotated[SwarmSpec, Body()]

Unmarked fields form the JSON body unless a field is marked ``Body()``.
"""

from dataclasses import dataclass
from enum import StrEnum


class QueryStyle(StrEnum):
    """How a query parameter value is put on the wire. Fixed per parameter by the engine's parser."""

    SCALAR = "scalar"  # stringified single value
    REPEAT = "repeat"  # one name=value pair per list item
    JSON = "json"  # single JSON-encoded value


@dataclass(frozen=True, slots=True)
class Query:
    """Field is sent as a query parameter."""

    name: str
    style: QueryStyle = QueryStyle.SCALAR


@dataclass(frozen=True, slots=True)
class Header:
    """Field is sent as a request header (objects as base64url JSON)."""

    name: str


@dataclass(frozen=True, slots=True)
class Body:
    """Field value is the whole request body."""

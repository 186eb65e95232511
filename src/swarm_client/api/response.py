"""Classify engine responses into typed results, streams, or structured errors.

Shared status policy for every operation:

    2xx   success, body decoded as the operation's declared result type
    503   PreconditionFailedError on swarm-scoped operations (node is not a swarm member)
    other ApiError carrying the server's {"message": ...} or the raw body text
"""

import logging
from collections.abc import Callable, Mapping
from http import HTTPStatus
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from swarm_client.api.operations import Operation
from swarm_client.api.transport import TransportResponse
from swarm_client.errors import ApiError, PreconditionFailedError, ResponseDecodeError
from swarm_client.models import ApiResponse
from swarm_client.stream.demux import DEFAULT_MAX_PENDING, DemuxedStreams, RawStream
from swarm_client.stream.frame import Frame

logger = logging.getLogger(__name__)


class ErrorBody(BaseModel):
    """Engine error payload."""

    message: str


def is_success(operation: Operation, status_code: int) -> bool:
    """Return True for 2xx, and for 101 (upgraded connection) on streaming operations."""
    if operation.streaming and status_code == HTTPStatus.SWITCHING_PROTOCOLS:
        return True
    return 200 <= status_code < 300


def error_message(status_code: int, headers: Mapping[str, str], body: bytes) -> str:
    """Extract the server's message, falling back to the raw body text, then the reason phrase."""
    content_type = headers.get("content-type", "")
    if not content_type or "json" in content_type:
        try:
            return ErrorBody.model_validate_json(body).message
        except ValidationError:
            pass
    text = body.decode("utf-8", errors="replace").strip()
    if text:
        return text
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP {status_code}"


def error_for(operation: Operation, status_code: int, headers: Mapping[str, str], body: bytes) -> ApiError:
    """Build the structured error for a non-success response."""
    message = error_message(status_code, headers, body)
    logger.warning("%s failed with %d: %s", operation.name, status_code, message)
    if status_code == HTTPStatus.SERVICE_UNAVAILABLE and operation.swarm_scoped:
        return PreconditionFailedError(status_code, message)
    return ApiError(status_code, message)


def interpret(operation: Operation, status_code: int, headers: Mapping[str, str], body: bytes) -> Any:
    """Map a buffered response to the operation's result.

    Raises:
        PreconditionFailedError: 503 on a swarm-scoped operation.
        ApiError: Any other non-success status.
        ResponseDecodeError: Success body does not match the declared result type.

    """
    if not is_success(operation, status_code):
        raise error_for(operation, status_code, headers, body)
    if operation.result is None:
        return None
    if operation.result is ApiResponse:
        return ApiResponse(status_code=status_code, body=body.decode("utf-8", errors="replace"))
    try:
        return TypeAdapter(operation.result).validate_json(body)
    except ValidationError as e:
        raise ResponseDecodeError(f"Unexpected response body for {operation.name}: {e}") from e


async def open_stream(
    operation: Operation,
    response: TransportResponse,
    *,
    tty: bool,
    max_pending: int = DEFAULT_MAX_PENDING,
    system_sink: Callable[[Frame], None] | None = None,
) -> RawStream | DemuxedStreams:
    """Hand a streaming response body to the caller.

    The ``tty`` flag mirrors how the remote resource was created: with a TTY the
    body is a plain byte stream, otherwise it is multiplexed and gets demultiplexed.
    The body is never inspected to guess which one it is.

    Raises:
        PreconditionFailedError: 503 on a swarm-scoped operation.
        ApiError: Any other non-success status.

    """
    if not is_success(operation, response.status_code):
        body = await response.read()
        raise error_for(operation, response.status_code, response.headers, body)
    if tty:
        return RawStream(response.body)
    return DemuxedStreams(response.body, max_pending=max_pending, system_sink=system_sink)

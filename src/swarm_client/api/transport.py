"""HTTP transport collaborator: sends an HttpRequest, returns status, headers, and a body source.

Connection pooling, Unix-socket dialing and timeouts are delegated to httpx.
Retries are not performed here.
"""

import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Protocol

import httpx

from swarm_client.api.request import HttpRequest
from swarm_client.errors import TransportFailureError
from swarm_client.stream.frame import ByteSource, ChunkedByteSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class TransportResponse:
    """Response whose headers have arrived; the body is still unread."""

    status_code: int
    headers: Mapping[str, str]
    body: ByteSource

    async def read(self) -> bytes:
        """Read the whole body and close it."""
        parts: list[bytes] = []
        try:
            while chunk := await self.body.read(65536):
                parts.append(chunk)
        finally:
            await self.body.aclose()
        return b"".join(parts)


class Transport(Protocol):
    """Anything that can send an HttpRequest."""

    async def send(self, request: HttpRequest) -> TransportResponse:
        """Send the request and return once response headers are received."""
        ...

    async def aclose(self) -> None:
        """Release pooled connections."""
        ...


class HttpxTransport:
    """Transport over an httpx.AsyncClient (Unix socket or TCP)."""

    def __init__(
        self,
        base_url: str,
        *,
        socket_path: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: URL prefix for every request, including any API version segment.
            socket_path: Unix socket to dial instead of TCP.
            timeout: Connect/write/pool timeout in seconds. Reads never time out so followed streams stay open.
            client: Preconfigured client to use instead of building one (not closed by aclose()).

        """
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        if client is None:
            transport = httpx.AsyncHTTPTransport(uds=socket_path) if socket_path else None
            client = httpx.AsyncClient(transport=transport, timeout=httpx.Timeout(timeout, read=None))
        self._client = client

    async def send(self, request: HttpRequest) -> TransportResponse:
        """Send the request and return once headers are in. Cancelling the caller aborts the request.

        Raises:
            TransportFailureError: Connection-level failure.

        """
        http_request = self._client.build_request(
            request.method,
            request.url(self._base_url),
            headers=request.headers,
            content=request.body,
        )
        logger.debug("Request: %s %s", request.method, request.target)
        try:
            response = await self._client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            raise TransportFailureError(f"{request.method} {request.path} failed: {e}") from e
        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers,
            body=ChunkedByteSource(_iter_body(response), close=response.aclose),
        )

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()


async def _iter_body(response: httpx.Response) -> AsyncIterator[bytes]:
    """Yield raw body chunks, reporting connection failures as TransportFailureError."""
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    except httpx.HTTPError as e:
        raise TransportFailureError(f"Connection failed while reading the response body: {e}") from e

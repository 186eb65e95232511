"""Tests for the httpx transport."""

import httpx
import pytest

from swarm_client.api import operations as ops
from swarm_client.api.request import build_request
from swarm_client.api.transport import HttpxTransport
from swarm_client.stream.demux import DemuxedStreams
from swarm_client.stream.frame import Frame, StreamKind, encode_frame
from swarm_client.errors import TransportFailureError
from swarm_client.models import ServicesListParameters, SwarmLeaveParameters


class BrokenBody(httpx.AsyncByteStream):
    """Response body that drops the connection after its first chunk."""

    def __init__(self, first: bytes) -> None:
        self._first = first

    async def __aiter__(self):
        yield self._first
        raise httpx.ReadError("connection reset by peer")


class TestHttpxTransport:
    """HttpxTransport maps HttpRequest onto httpx."""

    @pytest.mark.asyncio
    async def test_request_mapping(self):
        """Method, URL prefix, query, headers and body reach the wire."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = HttpxTransport("http://docker/v1.43/", client=client)
        params = ServicesListParameters(filters={"name": ["web"]})
        response = await transport.send(build_request(ops.LIST_SERVICES, params=params))
        assert response.status_code == 200
        assert await response.read() == b"[]"

        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/v1.43/services"
        assert request.url.params["filters"] == '{"name":["web"]}'
        await client.aclose()

    @pytest.mark.asyncio
    async def test_escaped_path_preserved(self):
        """Percent-encoded identifiers stay a single path segment."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = HttpxTransport("http://docker", client=client)
        await transport.send(build_request(ops.INSPECT_SERVICE, path_params={"id": "a/b"}))
        assert seen[0].url.raw_path == b"/services/a%2Fb"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_json_body(self):
        """Bodies are sent with their content type."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = HttpxTransport("http://docker", client=client)
        request = build_request(ops.LEAVE_SWARM, params=SwarmLeaveParameters(force=True))
        await (await transport.send(request)).read()
        assert seen[0].method == "POST"
        assert seen[0].url.params["force"] == "1"
        assert seen[0].content == b""
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        """httpx connection errors surface as TransportFailureError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = HttpxTransport("http://docker", client=client)
        with pytest.raises(TransportFailureError, match="connection refused"):
            await transport.send(build_request(ops.INSPECT_SWARM))
        await client.aclose()

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        """aclose() leaves a caller-supplied client open."""
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        transport = HttpxTransport("http://docker", client=client)
        await transport.aclose()
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_lost_mid_stream(self):
        """A read error after some frames fails both demultiplexed outputs with TransportFailureError."""
        body = BrokenBody(encode_frame(Frame(StreamKind.PRIMARY, b"a")))
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, stream=body)))
        transport = HttpxTransport("http://docker", client=client)
        response = await transport.send(build_request(ops.GET_SERVICE_LOGS, path_params={"id": "web"}))
        streams = DemuxedStreams(response.body)
        assert await streams.primary.read() == b"a"
        with pytest.raises(TransportFailureError, match="connection reset by peer") as primary_exc:
            await streams.primary.read()
        with pytest.raises(TransportFailureError) as secondary_exc:
            await streams.secondary.read()
        assert primary_exc.value is secondary_exc.value
        await streams.aclose()
        await client.aclose()

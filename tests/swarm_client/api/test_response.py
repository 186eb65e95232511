"""Tests for the response interpreter."""

import pytest

from swarm_client.api import operations as ops
from swarm_client.api.operations import Operation
from swarm_client.api.response import error_message, interpret, open_stream
from swarm_client.api.transport import TransportResponse
from swarm_client.errors import ApiError, PreconditionFailedError, ResponseDecodeError
from swarm_client.models import ApiResponse, SwarmInspectResponse, SwarmService
from swarm_client.stream.demux import DemuxedStreams, RawStream
from swarm_client.stream.frame import BytesSource

JSON = {"content-type": "application/json"}
HELLO = bytes.fromhex("0100000000000005") + b"hello"


class TestSuccess:
    """2xx bodies decode to the declared result type."""

    def test_model(self):
        """Object body decodes to its model."""
        body = b'{"ID": "abc", "Version": {"Index": 9}, "JoinTokens": {"Worker": "SWMTKN-w"}}'
        result = interpret(ops.INSPECT_SWARM, 200, JSON, body)
        assert isinstance(result, SwarmInspectResponse)
        assert result.id == "abc"
        assert result.version.index == 9
        assert result.join_tokens.worker == "SWMTKN-w"

    def test_list(self):
        """Array body decodes to a list of models."""
        body = b'[{"ID": "s1", "Spec": {"Name": "web"}}, {"ID": "s2"}]'
        result = interpret(ops.LIST_SERVICES, 200, JSON, body)
        assert [s.id for s in result] == ["s1", "s2"]
        assert isinstance(result[0], SwarmService)
        assert result[0].spec.name == "web"

    def test_unknown_keys_kept(self):
        """Keys unknown to the model survive decoding."""
        result = interpret(ops.INSPECT_SERVICE, 200, JSON, b'{"ID": "s1", "NewField": 1}')
        assert result.model_extra == {"NewField": 1}

    def test_string(self):
        """Swarm init returns the node ID as a JSON string."""
        assert interpret(ops.INIT_SWARM, 200, JSON, b'"node-id"\n') == "node-id"

    def test_no_result(self):
        """Operations without a result ignore the body."""
        assert interpret(ops.JOIN_SWARM, 200, {}, b"") is None

    def test_api_response(self):
        """Bare-response operations carry status and body text."""
        assert interpret(ops.REMOVE_CONFIG, 204, {}, b"") == ApiResponse(status_code=204, body="")

    def test_created(self):
        """201 is a success."""
        result = interpret(ops.CREATE_CONFIG, 201, JSON, b'{"ID": "cfg1"}')
        assert result.id == "cfg1"

    def test_undecodable_body(self):
        """Success body not matching the result type raises ResponseDecodeError."""
        with pytest.raises(ResponseDecodeError):
            interpret(ops.LIST_NODES, 200, JSON, b'{"not": "a list"}')


class TestErrors:
    """Non-2xx statuses become structured errors."""

    def test_api_error_message(self):
        """Server message is extracted from the error payload."""
        with pytest.raises(ApiError) as exc_info:
            interpret(ops.INSPECT_SERVICE, 404, JSON, b'{"message": "service web not found"}')
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "service web not found"
        assert not isinstance(exc_info.value, PreconditionFailedError)

    def test_503_is_precondition_failed(self):
        """503 on a swarm-scoped operation is PreconditionFailedError."""
        body = b'{"message": "This node is not a swarm manager."}'
        with pytest.raises(PreconditionFailedError) as exc_info:
            interpret(ops.LIST_NODES, 503, JSON, body)
        assert exc_info.value.status_code == 503
        assert exc_info.value.code == "precondition_failed"

    def test_500_is_generic(self):
        """500 is a plain ApiError."""
        with pytest.raises(ApiError) as exc_info:
            interpret(ops.LIST_NODES, 500, JSON, b'{"message": "boom"}')
        assert type(exc_info.value) is ApiError
        assert exc_info.value.code == "api_error"

    def test_503_not_swarm_scoped(self):
        """503 on an operation outside swarm scope stays a generic ApiError."""
        op = Operation("system.ping", "GET", "/_ping", swarm_scoped=False)
        with pytest.raises(ApiError) as exc_info:
            interpret(op, 503, {}, b"")
        assert type(exc_info.value) is ApiError

    def test_raw_body_fallback(self):
        """Unparseable error body is used verbatim."""
        with pytest.raises(ApiError) as exc_info:
            interpret(ops.INSPECT_NODE, 500, {"content-type": "text/plain"}, b"page not found\n")
        assert exc_info.value.message == "page not found"

    def test_json_without_message(self):
        """JSON error without a message field falls back to the raw text."""
        assert error_message(400, JSON, b'{"error": "bad"}') == '{"error": "bad"}'

    def test_empty_body_reason_phrase(self):
        """Empty error body falls back to the HTTP reason phrase."""
        assert error_message(409, {}, b"") == "Conflict"
        assert error_message(599, {}, b"") == "HTTP 599"


def _response(status: int, body: bytes) -> TransportResponse:
    return TransportResponse(status_code=status, headers=JSON, body=BytesSource(body))


class TestOpenStream:
    """Streaming responses are routed by the caller's tty flag."""

    @pytest.mark.asyncio
    async def test_multiplexed(self):
        """tty=False demultiplexes the body."""
        stream = await open_stream(ops.GET_SERVICE_LOGS, _response(200, HELLO), tty=False)
        assert isinstance(stream, DemuxedStreams)
        assert await stream.read_to_end() == (b"hello", b"")

    @pytest.mark.asyncio
    async def test_tty_bypass(self):
        """tty=True returns the body untouched, even if it looks multiplexed."""
        stream = await open_stream(ops.GET_SERVICE_LOGS, _response(200, HELLO), tty=True)
        assert isinstance(stream, RawStream)
        assert await stream.read_all() == HELLO

    @pytest.mark.asyncio
    async def test_switching_protocols(self):
        """101 is a success for streaming operations."""
        stream = await open_stream(ops.GET_SERVICE_LOGS, _response(101, b"raw"), tty=True)
        assert await stream.read_all() == b"raw"

    @pytest.mark.asyncio
    async def test_error_reads_and_closes_body(self):
        """Error status raises with the server message and closes the body."""
        response = _response(503, b'{"message": "node is not part of a swarm"}')
        with pytest.raises(PreconditionFailedError, match="not part of a swarm"):
            await open_stream(ops.GET_SERVICE_LOGS, response, tty=False)
        assert response.body.closed

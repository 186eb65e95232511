"""Request/response mapping layer: operation table, request builder, response interpreter, transport."""

from swarm_client.api.operations import Operation as Operation
from swarm_client.api.request import HttpRequest as HttpRequest
from swarm_client.api.request import build_request as build_request
from swarm_client.api.response import interpret as interpret
from swarm_client.api.response import open_stream as open_stream
from swarm_client.api.transport import HttpxTransport as HttpxTransport
from swarm_client.api.transport import Transport as Transport
from swarm_client.api.transport import TransportResponse as TransportResponse

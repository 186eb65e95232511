"""Asynchronous client for a container engine's swarm management API."""

from swarm_client.client import SwarmClient as SwarmClient
from swarm_client.config import Config as Config
from swarm_client.errors import ApiError as ApiError
from swarm_client.errors import EngineStreamError as EngineStreamError
from swarm_client.errors import MalformedFrameError as MalformedFrameError
from swarm_client.errors import PreconditionFailedError as PreconditionFailedError
from swarm_client.errors import StreamCancelledError as StreamCancelledError
from swarm_client.errors import SwarmClientError as SwarmClientError
from swarm_client.errors import TransportFailureError as TransportFailureError

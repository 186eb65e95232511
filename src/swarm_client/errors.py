"""Error taxonomy for swarm-client operations and streams."""


class SwarmClientError(Exception):
    """Base error raised by swarm-client."""

    code = "error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        """Initialize with a human-readable message and an optional machine-readable code override.

        Args:
            message: Human-readable error description.
            code: Machine-readable error code (defaults to the class code, e.g. "api_error").

        """
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class MalformedFrameError(SwarmClientError):
    """Multiplexed stream violated the frame format. Fatal to the stream pair."""

    code = "malformed_frame"


class TransportFailureError(SwarmClientError):
    """Connection-level failure reported by the transport. Never retried here."""

    code = "transport_failure"


class StreamCancelledError(SwarmClientError):
    """Demultiplexed stream pair was cancelled before the remote side finished."""

    code = "stream_cancelled"


class ResponseDecodeError(SwarmClientError):
    """Success response body did not match the operation's declared result type."""

    code = "invalid_response"


class ApiError(SwarmClientError):
    """Engine rejected the request with a non-2xx status."""

    code = "api_error"

    def __init__(self, status_code: int, message: str) -> None:
        """Initialize with the HTTP status and the server-supplied message.

        Args:
            status_code: HTTP status code returned by the engine.
            message: Server-supplied error message (or raw body text).

        """
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"


class PreconditionFailedError(ApiError):
    """Swarm membership precondition not met (503 on a swarm-scoped operation)."""

    code = "precondition_failed"


class EngineStreamError(SwarmClientError):
    """Engine aborted a multiplexed stream with an error frame; the message is the frame's text."""

    code = "stream_error"

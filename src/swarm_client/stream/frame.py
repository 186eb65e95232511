"""Frame format of the engine's multiplexed log/attach streams.

Each frame is an 8-byte header followed by the payload:

    byte 0     stream kind (0 = stdin/system, 1 = stdout, 2 = stderr, 3 = engine error)
    bytes 1-3  reserved, written as zero, ignored on read
    bytes 4-7  payload length, big-endian uint32

Example: ``01 00 00 00 00 00 00 05 68 65 6c 6c 6f`` is "hello" on stdout.
"""

import struct
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

from swarm_client.errors import MalformedFrameError

HEADER_SIZE = 8
MAX_PAYLOAD_LENGTH = 0xFFFFFFFF
_HEADER_FORMAT = ">BxxxI"  # kind, 3 reserved bytes, length


class StreamKind(IntEnum):
    """Logical stream a frame belongs to."""

    SYSTEM = 0
    PRIMARY = 1
    SECONDARY = 2
    ERROR = 3


@dataclass(frozen=True, slots=True)
class Frame:
    """One length-prefixed, kind-tagged chunk of a multiplexed stream."""

    kind: StreamKind
    payload: bytes = b""

    @property
    def payload_length(self) -> int:
        """Number of payload bytes following the header."""
        return len(self.payload)


class ByteSource(Protocol):
    """Readable byte source consumed by the frame decoder."""

    async def read(self, n: int) -> bytes:
        """Return up to n bytes, or b"" once the source is exhausted."""
        ...

    async def aclose(self) -> None:
        """Release the underlying resource."""
        ...


class BytesSource:
    """In-memory byte source over a complete buffer."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._pos = 0
        self.closed = False

    async def read(self, n: int) -> bytes:
        chunk = bytes(self._data[self._pos : self._pos + n])
        self._pos += len(chunk)
        return chunk

    async def aclose(self) -> None:
        self.closed = True


class ChunkedByteSource:
    """Adapt an async iterator of body chunks (e.g. an HTTP response) to a ByteSource.

    Holds at most one partially consumed chunk, so memory stays bounded by the
    transport's chunk size.
    """

    def __init__(self, chunks: AsyncIterator[bytes], close: Callable[[], Awaitable[None]] | None = None) -> None:
        """Initialize the source.

        Args:
            chunks: Async iterator yielding raw body chunks.
            close: Coroutine function releasing the underlying response; called by aclose().

        """
        self._chunks = chunks
        self._close = close
        self._pending = b""
        self._exhausted = False

    async def read(self, n: int) -> bytes:
        while not self._pending and not self._exhausted:
            try:
                self._pending = await anext(self._chunks)
            except StopAsyncIteration:
                self._exhausted = True
        chunk, self._pending = self._pending[:n], self._pending[n:]
        return chunk

    async def aclose(self) -> None:
        self._pending = b""
        self._exhausted = True
        if self._close is not None:
            await self._close()


def encode_frame(frame: Frame) -> bytes:
    """Serialize a frame to its exact wire bytes (header + payload)."""
    if frame.payload_length > MAX_PAYLOAD_LENGTH:
        msg = f"Payload of {frame.payload_length} bytes does not fit a frame."
        raise ValueError(msg)
    return struct.pack(_HEADER_FORMAT, frame.kind, frame.payload_length) + frame.payload


def parse_header(header: bytes) -> tuple[StreamKind, int]:
    """Parse an 8-byte frame header into (kind, payload_length).

    Raises:
        MalformedFrameError: Header has the wrong size or an unknown stream kind.

    """
    if len(header) != HEADER_SIZE:
        raise MalformedFrameError(f"Frame header must be {HEADER_SIZE} bytes, got {len(header)}.")
    kind_byte, length = struct.unpack(_HEADER_FORMAT, header)
    try:
        kind = StreamKind(kind_byte)
    except ValueError:
        raise MalformedFrameError(f"Unknown stream kind {kind_byte} in frame header.") from None
    return kind, length


class FrameDecoder:
    """Lazy, single-pass decoder turning a ByteSource into Frames.

    Only the frame currently being read is buffered.
    """

    def __init__(self, source: ByteSource) -> None:
        self._source = source

    async def next_frame(self) -> Frame | None:
        """Read the next frame, or return None when the source ends at a frame boundary.

        Raises:
            MalformedFrameError: Source ended inside a header or a payload, or the kind byte is unknown.

        """
        header = await self._read_exact(HEADER_SIZE)
        if not header:
            return None
        if len(header) < HEADER_SIZE:
            raise MalformedFrameError(f"Stream ended inside a frame header ({len(header)} of {HEADER_SIZE} bytes).")
        kind, length = parse_header(header)
        payload = await self._read_exact(length)
        if len(payload) < length:
            raise MalformedFrameError(f"Stream ended inside a frame payload ({len(payload)} of {length} bytes).")
        return Frame(kind, payload)

    def __aiter__(self) -> AsyncIterator[Frame]:
        return self._iter_frames()

    async def _iter_frames(self) -> AsyncIterator[Frame]:
        while (frame := await self.next_frame()) is not None:
            yield frame

    async def _read_exact(self, n: int) -> bytes:
        """Read n bytes, returning fewer only if the source is exhausted."""
        parts: list[bytes] = []
        remaining = n
        while remaining > 0:
            chunk = await self._source.read(remaining)
            if not chunk:
                break
            parts.append(chunk)
            remaining -= len(chunk)
        return b"".join(parts)


async def decode_frames(data: bytes) -> list[Frame]:
    """Decode a complete multiplexed buffer into its frames."""
    return [frame async for frame in FrameDecoder(BytesSource(data))]

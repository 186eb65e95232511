"""Split a multiplexed engine stream into independent stdout/stderr streams.

One background pump task decodes frames from the shared source and feeds two
bounded per-output queues. Each output is drained by its own consumer; the pump
waits whenever the output it needs to feed is full, so an unread output stalls
the source instead of growing memory.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Self

from swarm_client.errors import EngineStreamError, StreamCancelledError
from swarm_client.stream.frame import ByteSource, Frame, FrameDecoder, StreamKind

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 16
_RAW_CHUNK_SIZE = 65536


@dataclass(frozen=True, slots=True)
class _End:
    """Terminal marker placed on an output queue."""

    error: BaseException | None = None


class OutputStream:
    """One demultiplexed output, read by a single consumer."""

    def __init__(self, name: str, max_pending: int, start: Callable[[], None]) -> None:
        """Initialize an output.

        Args:
            name: Output name used in logs ("primary" or "secondary").
            max_pending: Maximum number of undelivered chunks before the producer waits.
            start: Callback starting the shared pump, invoked on first read.

        """
        self.name = name
        self._queue: asyncio.Queue[bytes | _End] = asyncio.Queue()
        # Bounds undelivered chunks; end markers bypass it so termination never blocks.
        self._slots = asyncio.Semaphore(max_pending)
        self._start = start
        self._finished = False
        self._end: _End | None = None

    @property
    def at_eof(self) -> bool:
        """True once the consumer has observed the end of this output."""
        return self._end is not None

    async def read(self) -> bytes:
        """Return the next chunk, or b"" at end-of-stream.

        Raises:
            StreamCancelledError: The stream pair was cancelled.
            MalformedFrameError: The multiplexed source was corrupt.
            EngineStreamError: The engine aborted the stream with an error frame.
            TransportFailureError: The connection failed mid-stream.

        """
        if self._end is None:
            self._start()
            item = await self._queue.get()
            if isinstance(item, bytes):
                self._slots.release()
                return item
            self._end = item
        if self._end.error is not None:
            raise self._end.error
        return b""

    async def read_all(self) -> bytes:
        """Read until end-of-stream and return everything."""
        return b"".join([chunk async for chunk in self])

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        while chunk := await self.read():
            yield chunk

    async def _append(self, payload: bytes) -> None:
        """Producer side: queue a payload, waiting while the output is full."""
        if not payload or self._finished:
            return
        await self._slots.acquire()
        self._queue.put_nowait(payload)

    def _finish(self, error: BaseException | None = None, *, discard: bool = False) -> None:
        """Producer side: end the output, optionally dropping chunks not yet read."""
        if self._finished:
            return
        self._finished = True
        if discard:
            while not self._queue.empty():
                self._queue.get_nowait()
        self._queue.put_nowait(_End(error))


class DemuxedStreams:
    """Pair of outputs (primary = stdout, secondary = stderr) sharing one multiplexed source.

    The pair owns the source: it is closed exactly once, when the stream ends,
    fails, or the pair is closed. Closing early ends both outputs with
    StreamCancelledError.
    """

    def __init__(
        self,
        source: ByteSource,
        *,
        max_pending: int = DEFAULT_MAX_PENDING,
        system_sink: Callable[[Frame], None] | None = None,
        frame_observer: Callable[[Frame], None] | None = None,
    ) -> None:
        """Initialize the pair. The pump starts on first read or on entering the context.

        Args:
            source: Multiplexed byte source, owned by the pair from now on.
            max_pending: Per-output bound on undelivered chunks.
            system_sink: Receives SYSTEM (stdin) frames; they are dropped when not set.
            frame_observer: Sees every decoded frame, including empty ones, in wire order.

        """
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1.")
        self._source = source
        self._decoder = FrameDecoder(source)
        self._system_sink = system_sink
        self._frame_observer = frame_observer
        self.primary = OutputStream("primary", max_pending, self.start)
        self.secondary = OutputStream("secondary", max_pending, self.start)
        self._pump_task: asyncio.Task[None] | None = None
        self._closing = False
        self._source_closed = False
        self._close_task: asyncio.Task[None] | None = None

    @property
    def stdout(self) -> OutputStream:
        """Alias for the primary output."""
        return self.primary

    @property
    def stderr(self) -> OutputStream:
        """Alias for the secondary output."""
        return self.secondary

    def start(self) -> None:
        """Start the pump task if it is not running yet."""
        if self._pump_task is None and not self._closing:
            self._pump_task = asyncio.get_running_loop().create_task(self._pump(), name="swarm-client-demux")

    async def read_to_end(self) -> tuple[bytes, bytes]:
        """Drain both outputs concurrently and return (stdout, stderr)."""
        stdout, stderr = await asyncio.gather(self.primary.read_all(), self.secondary.read_all())
        return stdout, stderr

    def cancel(self) -> None:
        """End unfinished outputs with StreamCancelledError and start releasing the source.

        Returns without waiting; aclose() also waits until the source is closed.
        Must be called from the event loop running the pair.
        """
        if self._closing:
            return
        self._closing = True
        task = self._pump_task
        if task is not None and not task.done() and not self._outputs_finished():
            task.cancel()
        self._finish_outputs(StreamCancelledError("Stream was cancelled."), discard=True)
        if task is None:
            self._schedule_close()
        else:
            # A pump cancelled before its first step never reaches its own cleanup.
            task.add_done_callback(lambda _: self._schedule_close())

    async def aclose(self) -> None:
        """Cancel the pair and wait until the source is closed. Outputs that already ended keep their end."""
        self.cancel()
        if self._pump_task is not None:
            # A pump whose outputs have ended is only closing the source; it is awaited, not cancelled.
            await asyncio.wait([self._pump_task])
        if self._close_task is not None:
            await self._close_task
        await self._close_source()

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        await self.aclose()

    async def _pump(self) -> None:
        try:
            async for frame in self._decoder:
                await self._dispatch(frame)
        except asyncio.CancelledError:
            logger.debug("Demux pump cancelled.")
            self._finish_outputs(StreamCancelledError("Stream was cancelled."), discard=True)
            raise
        except Exception as e:
            logger.debug("Demux pump failed: %s", e)
            self._finish_outputs(e)
        else:
            logger.debug("Demux source reached end of stream.")
            self._finish_outputs(None)
        finally:
            await self._close_source()

    async def _dispatch(self, frame: Frame) -> None:
        if self._frame_observer is not None:
            self._frame_observer(frame)
        match frame.kind:
            case StreamKind.PRIMARY:
                await self.primary._append(frame.payload)
            case StreamKind.SECONDARY:
                await self.secondary._append(frame.payload)
            case StreamKind.SYSTEM:
                if self._system_sink is not None:
                    self._system_sink(frame)
            case StreamKind.ERROR:
                message = frame.payload.decode("utf-8", errors="replace").strip()
                raise EngineStreamError(message or "Engine reported a stream error.")

    def _finish_outputs(self, error: BaseException | None, *, discard: bool = False) -> None:
        self.primary._finish(error, discard=discard)
        self.secondary._finish(error, discard=discard)

    def _outputs_finished(self) -> bool:
        return self.primary._finished and self.secondary._finished

    def _schedule_close(self) -> None:
        if not self._source_closed and self._close_task is None:
            self._close_task = asyncio.get_running_loop().create_task(self._close_source())

    async def _close_source(self) -> None:
        if self._source_closed:
            return
        self._source_closed = True
        await self._source.aclose()


class RawStream:
    """Unmultiplexed body stream, used when the remote resource runs with a TTY."""

    def __init__(self, source: ByteSource, *, chunk_size: int = _RAW_CHUNK_SIZE) -> None:
        self._source = source
        self._chunk_size = chunk_size
        self._closed = False

    async def read(self) -> bytes:
        """Return the next chunk, or b"" at end-of-stream."""
        if self._closed:
            return b""
        return await self._source.read(self._chunk_size)

    async def read_all(self) -> bytes:
        """Read until end-of-stream and return everything."""
        return b"".join([chunk async for chunk in self])

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        while chunk := await self.read():
            yield chunk

    async def aclose(self) -> None:
        """Close the underlying source (once)."""
        if self._closed:
            return
        self._closed = True
        await self._source.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        await self.aclose()

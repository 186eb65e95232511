"""Tests for the multiplexed frame codec."""

import pytest

from swarm_client.errors import MalformedFrameError
from swarm_client.stream.frame import (
    HEADER_SIZE,
    BytesSource,
    ChunkedByteSource,
    Frame,
    FrameDecoder,
    StreamKind,
    decode_frames,
    encode_frame,
    parse_header,
)

HELLO = bytes.fromhex("0100000000000005") + b"hello"


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


class TestEncodeFrame:
    """encode_frame produces the wire layout."""

    def test_hello_stdout(self):
        """Stdout frame carrying 'hello' matches the documented bytes."""
        assert encode_frame(Frame(StreamKind.PRIMARY, b"hello")) == HELLO

    def test_reserved_bytes_zero(self):
        """Bytes 1-3 are written as zero."""
        encoded = encode_frame(Frame(StreamKind.SECONDARY, b"x"))
        assert encoded[1:4] == b"\x00\x00\x00"
        assert encoded[0] == 2

    def test_length_big_endian(self):
        """Payload length is a big-endian uint32."""
        encoded = encode_frame(Frame(StreamKind.PRIMARY, b"a" * 258))
        assert encoded[4:8] == b"\x00\x00\x01\x02"

    def test_empty_payload(self):
        """Zero-length frame is a bare header."""
        assert encode_frame(Frame(StreamKind.SYSTEM)) == bytes(HEADER_SIZE)


class TestParseHeader:
    """parse_header validation."""

    def test_reserved_bytes_ignored(self):
        """Non-zero reserved bytes do not change the result."""
        assert parse_header(bytes.fromhex("02ffffff00000003")) == (StreamKind.SECONDARY, 3)

    def test_unknown_kind(self):
        """Kind byte outside 0-3 is malformed."""
        with pytest.raises(MalformedFrameError):
            parse_header(bytes.fromhex("0400000000000001"))

    def test_engine_error_kind(self):
        """Kind 3 carries engine error text."""
        assert parse_header(bytes.fromhex("0300000000000004")) == (StreamKind.ERROR, 4)

    def test_wrong_size(self):
        """Header must be exactly 8 bytes."""
        with pytest.raises(MalformedFrameError):
            parse_header(b"\x01\x00")


class TestFrameDecoder:
    """FrameDecoder reads frames lazily from a ByteSource."""

    @pytest.mark.asyncio
    async def test_single_frame(self):
        """'hello' on stdout decodes to one primary frame, then end of stream."""
        decoder = FrameDecoder(BytesSource(HELLO))
        frame = await decoder.next_frame()
        assert frame == Frame(StreamKind.PRIMARY, b"hello")
        assert frame.payload_length == 5
        assert await decoder.next_frame() is None

    @pytest.mark.asyncio
    async def test_empty_source(self):
        """Empty source is end of stream at a frame boundary."""
        assert await decode_frames(b"") == []

    @pytest.mark.asyncio
    async def test_zero_length_frame_yielded(self):
        """Zero-length frames are yielded, keeping their position in the sequence."""
        frames = [Frame(StreamKind.PRIMARY, b"a"), Frame(StreamKind.SECONDARY), Frame(StreamKind.PRIMARY, b"b")]
        data = b"".join(encode_frame(f) for f in frames)
        assert await decode_frames(data) == frames

    @pytest.mark.asyncio
    async def test_round_trip_reproduces_bytes(self):
        """Decoding then re-encoding reproduces the original bytes exactly."""
        frames = [
            Frame(StreamKind.SYSTEM, b"in"),
            Frame(StreamKind.PRIMARY, b"out line\n"),
            Frame(StreamKind.SECONDARY, b""),
            Frame(StreamKind.SECONDARY, bytes(range(256))),
        ]
        data = b"".join(encode_frame(f) for f in frames)
        decoded = await decode_frames(data)
        assert b"".join(encode_frame(f) for f in decoded) == data

    @pytest.mark.asyncio
    async def test_frames_split_across_chunks(self):
        """Headers and payloads may arrive split over arbitrary chunk boundaries."""
        data = HELLO + encode_frame(Frame(StreamKind.SECONDARY, b"oops"))
        parts = [data[i : i + 3] for i in range(0, len(data), 3)]
        frames = [f async for f in FrameDecoder(ChunkedByteSource(_chunks(*parts)))]
        assert frames == [Frame(StreamKind.PRIMARY, b"hello"), Frame(StreamKind.SECONDARY, b"oops")]

    @pytest.mark.asyncio
    async def test_truncated_header(self):
        """Source ending inside a header is malformed."""
        with pytest.raises(MalformedFrameError):
            await decode_frames(HELLO + b"\x01\x00\x00")

    @pytest.mark.asyncio
    async def test_truncated_payload(self):
        """Source closing mid-payload is malformed."""
        with pytest.raises(MalformedFrameError):
            await decode_frames(HELLO[:-2])


class TestChunkedByteSource:
    """ChunkedByteSource adapts chunk iterators."""

    @pytest.mark.asyncio
    async def test_read_respects_limit(self):
        """read(n) returns at most n bytes and keeps the rest."""
        source = ChunkedByteSource(_chunks(b"abcdef"))
        assert await source.read(4) == b"abcd"
        assert await source.read(4) == b"ef"
        assert await source.read(4) == b""

    @pytest.mark.asyncio
    async def test_skips_empty_chunks(self):
        """Empty chunks from the transport are not mistaken for end of stream."""
        source = ChunkedByteSource(_chunks(b"", b"ab"))
        assert await source.read(10) == b"ab"

    @pytest.mark.asyncio
    async def test_aclose_calls_close(self):
        """aclose() invokes the close callback."""
        calls = []

        async def close():
            calls.append(True)

        source = ChunkedByteSource(_chunks(b"data"), close=close)
        await source.aclose()
        assert calls == [True]
        assert await source.read(4) == b""

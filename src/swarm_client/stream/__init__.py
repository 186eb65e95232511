"""Multiplexed stream subsystem: frame codec and stdout/stderr demultiplexer."""

from swarm_client.stream.demux import DemuxedStreams as DemuxedStreams
from swarm_client.stream.demux import OutputStream as OutputStream
from swarm_client.stream.demux import RawStream as RawStream
from swarm_client.stream.frame import ByteSource as ByteSource
from swarm_client.stream.frame import Frame as Frame
from swarm_client.stream.frame import FrameDecoder as FrameDecoder
from swarm_client.stream.frame import StreamKind as StreamKind

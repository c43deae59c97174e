"""
Streaming pipeline: bytes -> lines -> frames -> classified chunks -> events.
"""

from chatrelay.streaming.lines import LineReassembler, iter_lines
from chatrelay.streaming.frames import DONE, decode_frame_line, iter_frames
from chatrelay.streaming.splitter import (
    ChunkKind,
    FrameDelta,
    ReasoningSplitter,
    StreamChunk,
    split_stream,
)

__all__ = [
    "LineReassembler",
    "iter_lines",
    "DONE",
    "decode_frame_line",
    "iter_frames",
    "ChunkKind",
    "FrameDelta",
    "ReasoningSplitter",
    "StreamChunk",
    "split_stream",
]

"""Codec probing for source media files."""

from vconv.introspector.ffprobe import FFprobeProber
from vconv.introspector.interface import CodecProber, ProbeResult, StreamInfo
from vconv.introspector.parsers import parse_stream_listing, select_primary_codecs
from vconv.introspector.stub import StubProber

__all__ = [
    "CodecProber",
    "FFprobeProber",
    "ProbeResult",
    "StreamInfo",
    "StubProber",
    "parse_stream_listing",
    "select_primary_codecs",
]

"""Parsing of ffprobe stream listings.

Pure functions with no I/O, kept separate from FFprobeProber so they can be
tested against captured output.
"""

from __future__ import annotations

import json
from typing import Any

from vconv.introspector.interface import ProbeResult, StreamInfo
from vconv.jobs.exceptions import ProbeFailedError


def parse_stream_listing(output: str) -> list[StreamInfo]:
    """Parse ``ffprobe -print_format json -show_entries stream=...`` output.

    Args:
        output: Decoded ffprobe stdout.

    Returns:
        Streams in source order. Streams without a codec_type are skipped;
        a missing codec_name becomes "".

    Raises:
        ProbeFailedError: If the output is not a JSON object with a
            "streams" list.
    """
    try:
        data: Any = json.loads(output)
    except json.JSONDecodeError as e:
        raise ProbeFailedError(f"invalid ffprobe output: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("streams"), list):
        raise ProbeFailedError("ffprobe output has no stream list")

    streams: list[StreamInfo] = []
    for position, raw in enumerate(data["streams"]):
        if not isinstance(raw, dict):
            continue
        kind = str(raw.get("codec_type") or "").strip().casefold()
        if not kind:
            continue
        codec = str(raw.get("codec_name") or "").strip().casefold()
        index = raw.get("index")
        if not isinstance(index, int):
            index = position
        streams.append(StreamInfo(index=index, kind=kind, codec=codec))
    return streams


def select_primary_codecs(streams: list[StreamInfo]) -> ProbeResult:
    """Pick the first video and first audio codec.

    Raises:
        ProbeFailedError: If there is no video stream with a codec name.
    """
    video_codec = next((s.codec for s in streams if s.kind == "video"), "")
    audio_codec = next((s.codec for s in streams if s.kind == "audio"), "")

    if not video_codec:
        raise ProbeFailedError("no video stream found")

    return ProbeResult(
        video_codec=video_codec,
        audio_codec=audio_codec,
        streams=tuple(streams),
    )

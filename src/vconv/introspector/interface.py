"""CodecProber interface for source stream inspection."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class StreamInfo:
    """A single stream reported by the prober."""

    index: int
    kind: str
    codec: str


@dataclass(frozen=True)
class ProbeResult:
    """Codecs of the primary video and audio streams.

    Attributes:
        video_codec: Codec of the first video stream. Never empty.
        audio_codec: Codec of the first audio stream, or "" if the source
            has no audio.
        streams: Every stream in source order.
    """

    video_codec: str
    audio_codec: str = ""
    streams: tuple[StreamInfo, ...] = field(default=())

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_codec)


class CodecProber(Protocol):
    """Protocol for codec prober implementations.

    Implementations inspect a media file without modifying it and report
    the codec of its first video and first audio stream.
    """

    def probe(self, path: Path) -> ProbeResult:
        """Inspect a media file.

        Args:
            path: Path to the media file.

        Returns:
            ProbeResult for the file.

        Raises:
            ProbeFailedError: If the codecs cannot be determined.
            ToolNotFoundError: If the probing tool is unavailable.
        """
        ...

    async def probe_async(self, path: Path) -> ProbeResult:
        """Inspect a media file from a coroutine.

        Same contract as probe(). Cancelling the awaiting task must stop
        any helper process the prober started.
        """
        ...

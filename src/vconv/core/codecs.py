"""Container format registry and codec compatibility rules.

This module is the single source of truth for which codecs each supported
container accepts without re-encoding, and which encoders are used when a
stream has to be re-encoded. Everything here is immutable and side-effect
free.

Codec identifiers are compared case-insensitively by exact literal match.
No alias canonicalization is applied, so "avc1" and "h264" are distinct
entries even though they name the same bitstream.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StreamKind(Enum):
    """Kind of elementary stream handled by the planner."""

    VIDEO = "video"
    AUDIO = "audio"


class ContainerFormat(Enum):
    """Supported destination container formats."""

    MP4 = "mp4"
    MOV = "mov"
    MKV = "mkv"
    WEBM = "webm"
    AVI = "avi"

    @classmethod
    def from_string(cls, value: str) -> ContainerFormat:
        """Parse a format name or file extension.

        Accepts "mp4", "MP4" and ".mp4" alike.

        Args:
            value: Format name or extension.

        Returns:
            Matching ContainerFormat.

        Raises:
            ValueError: If the value does not name a supported format.
        """
        normalized = value.strip().casefold().lstrip(".")
        for member in cls:
            if member.value == normalized:
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unsupported format '{value}'. Valid formats: {valid}")

    @property
    def extension(self) -> str:
        """File extension (without dot) used for output files."""
        return FORMAT_SPECS[self].extension

    @property
    def display_name(self) -> str:
        return self.value.upper()


@dataclass(frozen=True)
class FormatSpec:
    """Static description of a container format.

    Attributes:
        extension: Output file extension without the leading dot.
        video_codecs: Video codecs that may be stream-copied, in table order.
        audio_codecs: Audio codecs that may be stream-copied, in table order.
        default_video_encoder: ffmpeg encoder used when video must be encoded.
        default_audio_encoder: ffmpeg encoder used when audio must be encoded.
    """

    extension: str
    video_codecs: tuple[str, ...]
    audio_codecs: tuple[str, ...]
    default_video_encoder: str
    default_audio_encoder: str


# =============================================================================
# Container Compatibility Table
# =============================================================================

FORMAT_SPECS: dict[ContainerFormat, FormatSpec] = {
    ContainerFormat.MP4: FormatSpec(
        extension="mp4",
        video_codecs=("h264", "hevc", "mpeg4", "avc", "avc1"),
        audio_codecs=("aac", "mp3"),
        default_video_encoder="libx264",
        default_audio_encoder="aac",
    ),
    ContainerFormat.MOV: FormatSpec(
        extension="mov",
        video_codecs=("h264", "hevc", "prores", "mpeg4", "avc", "avc1"),
        audio_codecs=("aac", "mp3", "pcm", "pcm_s16le"),
        default_video_encoder="libx264",
        default_audio_encoder="aac",
    ),
    ContainerFormat.MKV: FormatSpec(
        extension="mkv",
        video_codecs=("h264", "hevc", "vp9", "vp8", "av1", "mpeg4", "avc", "avc1"),
        audio_codecs=("aac", "mp3", "opus", "vorbis", "flac", "pcm", "pcm_s16le"),
        default_video_encoder="libx264",
        default_audio_encoder="aac",
    ),
    ContainerFormat.WEBM: FormatSpec(
        extension="webm",
        video_codecs=("vp9", "vp8"),
        audio_codecs=("opus", "vorbis"),
        default_video_encoder="libvpx-vp9",
        default_audio_encoder="libopus",
    ),
    ContainerFormat.AVI: FormatSpec(
        extension="avi",
        video_codecs=("h264", "mpeg4", "avc", "avc1"),
        audio_codecs=("aac", "mp3"),
        default_video_encoder="libx264",
        default_audio_encoder="aac",
    ),
}


# =============================================================================
# User-selectable Codecs and Presets
# =============================================================================


class VideoCodecChoice(Enum):
    """Video codec selection. AUTO copies when legal, else uses the default."""

    AUTO = "auto"
    H264 = "h264"
    HEVC = "hevc"
    VP9 = "vp9"
    VP8 = "vp8"

    @property
    def encoder(self) -> str | None:
        """ffmpeg encoder name, or None for AUTO."""
        return _VIDEO_ENCODERS.get(self)


class AudioCodecChoice(Enum):
    """Audio codec selection. AUTO copies when legal, else uses the default."""

    AUTO = "auto"
    AAC = "aac"
    MP3 = "mp3"
    OPUS = "opus"
    VORBIS = "vorbis"

    @property
    def encoder(self) -> str | None:
        """ffmpeg encoder name, or None for AUTO."""
        return _AUDIO_ENCODERS.get(self)


class SpeedPreset(Enum):
    """Encoder effort preset, fastest to slowest."""

    ULTRAFAST = "ultrafast"
    VERYFAST = "veryfast"
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"
    VERYSLOW = "veryslow"


_VIDEO_ENCODERS: dict[VideoCodecChoice, str] = {
    VideoCodecChoice.H264: "libx264",
    VideoCodecChoice.HEVC: "libx265",
    VideoCodecChoice.VP9: "libvpx-vp9",
    VideoCodecChoice.VP8: "libvpx",
}

_AUDIO_ENCODERS: dict[AudioCodecChoice, str] = {
    AudioCodecChoice.AAC: "aac",
    AudioCodecChoice.MP3: "libmp3lame",
    AudioCodecChoice.OPUS: "libopus",
    AudioCodecChoice.VORBIS: "libvorbis",
}

# Encoders that understand the x264-style -preset option
PRESET_AWARE_ENCODERS = frozenset({"libx264", "libx265"})

# libvpx needs an explicit zero bitrate to run in constant-quality mode
CONSTANT_QUALITY_ZERO_BITRATE_ENCODERS = frozenset({"libvpx", "libvpx-vp9"})


# =============================================================================
# Compatibility Queries
# =============================================================================


def get_format_spec(fmt: ContainerFormat) -> FormatSpec:
    """Return the static description of a container format."""
    return FORMAT_SPECS[fmt]


def accepted_codecs(fmt: ContainerFormat, kind: StreamKind) -> tuple[str, ...]:
    """Return the codecs a container accepts for stream copy.

    Args:
        fmt: Destination container.
        kind: Stream kind to query.

    Returns:
        Ordered tuple of lower-case codec identifiers.
    """
    spec = FORMAT_SPECS[fmt]
    if kind is StreamKind.VIDEO:
        return spec.video_codecs
    return spec.audio_codecs


def can_copy(fmt: ContainerFormat, kind: StreamKind, codec: str | None) -> bool:
    """Check whether a codec can be stream-copied into a container.

    Args:
        fmt: Destination container.
        kind: Stream kind of the codec.
        codec: Codec identifier as reported by the prober. Case is ignored.

    Returns:
        True if the codec is in the container's accepted set for that kind.
    """
    if not codec:
        return False
    return codec.casefold() in accepted_codecs(fmt, kind)


def default_encoder(fmt: ContainerFormat, kind: StreamKind) -> str:
    """Return the encoder used when a stream must be re-encoded for fmt."""
    spec = FORMAT_SPECS[fmt]
    if kind is StreamKind.VIDEO:
        return spec.default_video_encoder
    return spec.default_audio_encoder

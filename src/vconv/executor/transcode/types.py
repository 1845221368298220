"""Conversion settings and plan data types.

This module defines the user-facing settings for a conversion and the plan
produced from them by the planner.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from vconv.core.codecs import (
    AudioCodecChoice,
    ContainerFormat,
    SpeedPreset,
    VideoCodecChoice,
)

# Constant rate factor bounds exposed to users
MIN_CRF = 18
MAX_CRF = 28
DEFAULT_CRF = 23


@dataclass(frozen=True)
class ConversionSettings:
    """User choices for a single conversion.

    Immutable once constructed; the orchestrator snapshots the settings at
    the start of a job so later edits cannot affect it.
    """

    overwrite_original: bool = False
    """Replace the input file with the converted output."""

    output_directory: Path | None = None
    """Write the output here instead of beside the input."""

    include_video: bool = True
    include_audio: bool = True
    include_subtitles: bool = True

    video_codec: VideoCodecChoice = VideoCodecChoice.AUTO
    audio_codec: AudioCodecChoice = AudioCodecChoice.AUTO

    preset: SpeedPreset = SpeedPreset.MEDIUM
    """Encoder effort. Ignored for copied streams."""

    crf: int = DEFAULT_CRF
    """Constant rate factor, lower is higher quality."""

    bitrate_kbps: int | None = None
    """Video bitrate override in kbit/s. Only applied when video is encoded."""

    two_pass: bool = False
    """Accepted for compatibility. Conversions always run a single pass."""

    def __post_init__(self) -> None:
        """Validate settings."""
        if isinstance(self.crf, bool) or not isinstance(self.crf, int):
            raise ValueError(f"crf must be an integer, got {self.crf!r}")
        if not MIN_CRF <= self.crf <= MAX_CRF:
            raise ValueError(
                f"crf must be between {MIN_CRF} and {MAX_CRF}, got {self.crf}"
            )
        if self.bitrate_kbps is not None and (
            isinstance(self.bitrate_kbps, bool)
            or not isinstance(self.bitrate_kbps, int)
            or self.bitrate_kbps <= 0
        ):
            raise ValueError(
                f"bitrate_kbps must be a positive integer, got {self.bitrate_kbps!r}"
            )


class StreamDecision(Enum):
    """What happens to one stream kind in the output."""

    COPY = "copy"
    ENCODE = "encode"
    DROP = "drop"


class JobClassification(Enum):
    """How much of the job is re-encoding."""

    FULL_REMUX = "full_remux"
    PARTIAL_REMUX_VIDEO = "partial_remux_video"
    """Video copied, audio encoded."""
    PARTIAL_REMUX_AUDIO = "partial_remux_audio"
    """Audio copied, video encoded."""
    FULL_ENCODE = "full_encode"


@dataclass(frozen=True)
class ConversionPlan:
    """Per-stream decisions for a conversion.

    Attributes:
        target: Destination container.
        video: Decision for the video stream.
        audio: Decision for the audio stream.
        video_encoder: ffmpeg encoder when video is ENCODE, else None.
        audio_encoder: ffmpeg encoder when audio is ENCODE, else None.
        source_video_codec: Probed video codec.
        source_audio_codec: Probed audio codec, "" when absent.
    """

    target: ContainerFormat
    video: StreamDecision
    audio: StreamDecision
    video_encoder: str | None = None
    audio_encoder: str | None = None
    source_video_codec: str = ""
    source_audio_codec: str = ""

    @property
    def classification(self) -> JobClassification:
        encode_video = self.video is StreamDecision.ENCODE
        encode_audio = self.audio is StreamDecision.ENCODE
        if encode_video and encode_audio:
            return JobClassification.FULL_ENCODE
        if encode_video:
            return JobClassification.PARTIAL_REMUX_AUDIO
        if encode_audio:
            return JobClassification.PARTIAL_REMUX_VIDEO
        return JobClassification.FULL_REMUX

    @property
    def is_full_remux(self) -> bool:
        return self.classification is JobClassification.FULL_REMUX

    @property
    def initial_status(self) -> str:
        return _INITIAL_STATUS[self.classification]

    @property
    def action_label(self) -> str:
        """Verb shown in progress status lines."""
        return _ACTION_LABELS[self.classification]


_INITIAL_STATUS: dict[JobClassification, str] = {
    JobClassification.FULL_REMUX: "Remuxing (no encoding)...",
    JobClassification.PARTIAL_REMUX_VIDEO: "Copying video, encoding audio...",
    JobClassification.PARTIAL_REMUX_AUDIO: "Encoding video, copying audio...",
    JobClassification.FULL_ENCODE: "Encoding video and audio...",
}

_ACTION_LABELS: dict[JobClassification, str] = {
    JobClassification.FULL_REMUX: "Remuxing",
    JobClassification.PARTIAL_REMUX_VIDEO: "Encoding audio",
    JobClassification.PARTIAL_REMUX_AUDIO: "Encoding video",
    JobClassification.FULL_ENCODE: "Encoding",
}

"""Transcode planning: stream decisions and ffmpeg arguments."""

from vconv.executor.transcode.command import (
    build_audio_args,
    build_ffmpeg_args,
    build_ffmpeg_command,
    build_subtitle_args,
    build_video_args,
)
from vconv.executor.transcode.decisions import decide_stream, plan_conversion
from vconv.executor.transcode.types import (
    DEFAULT_CRF,
    MAX_CRF,
    MIN_CRF,
    ConversionPlan,
    ConversionSettings,
    JobClassification,
    StreamDecision,
)

__all__ = [
    "DEFAULT_CRF",
    "MAX_CRF",
    "MIN_CRF",
    "ConversionPlan",
    "ConversionSettings",
    "JobClassification",
    "StreamDecision",
    "build_audio_args",
    "build_ffmpeg_args",
    "build_ffmpeg_command",
    "build_subtitle_args",
    "build_video_args",
    "decide_stream",
    "plan_conversion",
]

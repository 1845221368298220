"""FFmpeg argument synthesis for conversions.

Turns a ConversionPlan plus settings into the exact ffmpeg argument list.
Everything here is pure: identical inputs always give identical output.
"""

from __future__ import annotations

import logging
from pathlib import Path

from vconv.core.codecs import (
    CONSTANT_QUALITY_ZERO_BITRATE_ENCODERS,
    PRESET_AWARE_ENCODERS,
)
from vconv.executor.transcode.types import (
    ConversionPlan,
    ConversionSettings,
    StreamDecision,
)

logger = logging.getLogger(__name__)


def build_video_args(plan: ConversionPlan, settings: ConversionSettings) -> list[str]:
    """Build video stream arguments.

    Args:
        plan: Conversion plan.
        settings: User settings supplying preset, CRF and bitrate.

    Returns:
        ``-vn`` for DROP, ``-c:v copy`` for COPY, otherwise the encoder
        followed by its preset and quality options.
    """
    if plan.video is StreamDecision.DROP:
        return ["-vn"]
    if plan.video is StreamDecision.COPY:
        return ["-c:v", "copy"]

    encoder = plan.video_encoder or ""
    args = ["-c:v", encoder]

    if encoder in PRESET_AWARE_ENCODERS:
        args.extend(["-preset", settings.preset.value])

    args.extend(["-crf", str(settings.crf)])

    if settings.bitrate_kbps is not None:
        args.extend(["-b:v", f"{settings.bitrate_kbps}k"])
    elif encoder in CONSTANT_QUALITY_ZERO_BITRATE_ENCODERS:
        args.extend(["-b:v", "0"])

    if settings.two_pass:
        logger.warning(
            "Two-pass encoding requested for %s but is not supported. "
            "Using single-pass.",
            encoder,
        )

    return args


def build_audio_args(plan: ConversionPlan) -> list[str]:
    """Build audio stream arguments."""
    if plan.audio is StreamDecision.DROP:
        return ["-an"]
    if plan.audio is StreamDecision.COPY:
        return ["-c:a", "copy"]
    return ["-c:a", plan.audio_encoder or ""]


def build_subtitle_args(settings: ConversionSettings) -> list[str]:
    if settings.include_subtitles:
        return ["-c:s", "copy"]
    return ["-sn"]


def build_ffmpeg_args(
    plan: ConversionPlan,
    settings: ConversionSettings,
    input_path: Path,
    output_path: Path,
) -> list[str]:
    """Build the ffmpeg argument list, without the executable.

    Order: input, video, audio, subtitles, overwrite flag, output.

    Args:
        plan: Conversion plan.
        settings: User settings.
        input_path: Source file.
        output_path: File ffmpeg writes to.

    Returns:
        List of command arguments.
    """
    args = ["-i", str(input_path)]
    args.extend(build_video_args(plan, settings))
    args.extend(build_audio_args(plan))
    args.extend(build_subtitle_args(settings))
    args.append("-y")
    args.append(str(output_path))
    return args


def build_ffmpeg_command(
    ffmpeg_path: Path,
    plan: ConversionPlan,
    settings: ConversionSettings,
    input_path: Path,
    output_path: Path,
) -> list[str]:
    """Build the full ffmpeg command line including the executable."""
    args = build_ffmpeg_args(plan, settings, input_path, output_path)
    return [str(ffmpeg_path), *args]

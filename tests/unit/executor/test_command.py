"""Tests for ffmpeg argument synthesis."""

import logging
from pathlib import Path

from vconv.core.codecs import ContainerFormat, SpeedPreset
from vconv.executor.transcode.command import (
    build_audio_args,
    build_ffmpeg_args,
    build_ffmpeg_command,
    build_video_args,
)
from vconv.executor.transcode.types import (
    ConversionPlan,
    ConversionSettings,
    StreamDecision,
)

IN = Path("/videos/in.mov")
OUT = Path("/videos/in_converted.mp4")


def _plan(
    video: StreamDecision = StreamDecision.COPY,
    audio: StreamDecision = StreamDecision.COPY,
    video_encoder: str | None = None,
    audio_encoder: str | None = None,
    target: ContainerFormat = ContainerFormat.MP4,
) -> ConversionPlan:
    return ConversionPlan(
        target=target,
        video=video,
        audio=audio,
        video_encoder=video_encoder,
        audio_encoder=audio_encoder,
    )


class TestBuildFfmpegArgs:
    """Whole-command layouts."""

    def test_full_remux(self) -> None:
        args = build_ffmpeg_args(_plan(), ConversionSettings(), IN, OUT)

        assert args == [
            "-i", str(IN),
            "-c:v", "copy",
            "-c:a", "copy",
            "-c:s", "copy",
            "-y", str(OUT),
        ]  # fmt: skip

    def test_x264_encode_with_subtitles_dropped(self) -> None:
        plan = _plan(StreamDecision.ENCODE, StreamDecision.ENCODE, "libx264", "aac")
        settings = ConversionSettings(
            preset=SpeedPreset.SLOW, crf=20, include_subtitles=False
        )

        args = build_ffmpeg_args(plan, settings, IN, OUT)

        assert args == [
            "-i", str(IN),
            "-c:v", "libx264", "-preset", "slow", "-crf", "20",
            "-c:a", "aac",
            "-sn",
            "-y", str(OUT),
        ]  # fmt: skip

    def test_vp9_gets_zero_bitrate_and_no_preset(self) -> None:
        plan = _plan(
            StreamDecision.ENCODE,
            StreamDecision.ENCODE,
            "libvpx-vp9",
            "libopus",
            ContainerFormat.WEBM,
        )

        args = build_ffmpeg_args(plan, ConversionSettings(), IN, Path("/o.webm"))

        assert args == [
            "-i", str(IN),
            "-c:v", "libvpx-vp9", "-crf", "23", "-b:v", "0",
            "-c:a", "libopus",
            "-c:s", "copy",
            "-y", "/o.webm",
        ]  # fmt: skip

    def test_dropped_streams(self) -> None:
        plan = _plan(StreamDecision.DROP, StreamDecision.DROP)
        args = build_ffmpeg_args(plan, ConversionSettings(), IN, OUT)

        assert "-vn" in args
        assert "-an" in args

    def test_output_is_last_and_overwrite_flag_precedes_it(self) -> None:
        args = build_ffmpeg_args(_plan(), ConversionSettings(), IN, OUT)
        assert args[-2:] == ["-y", str(OUT)]
        assert args[:2] == ["-i", str(IN)]

    def test_command_prefixes_executable(self) -> None:
        cmd = build_ffmpeg_command(
            Path("/usr/bin/ffmpeg"), _plan(), ConversionSettings(), IN, OUT
        )
        assert cmd[0] == "/usr/bin/ffmpeg"
        assert cmd[1:] == build_ffmpeg_args(_plan(), ConversionSettings(), IN, OUT)


class TestBuildVideoArgs:
    """Video option rules."""

    def test_copy_ignores_quality_settings(self) -> None:
        settings = ConversionSettings(crf=18, bitrate_kbps=5000)
        assert build_video_args(_plan(), settings) == ["-c:v", "copy"]

    def test_bitrate_applied_when_encoding(self) -> None:
        plan = _plan(StreamDecision.ENCODE, video_encoder="libx265")
        settings = ConversionSettings(bitrate_kbps=4000)

        args = build_video_args(plan, settings)

        assert args == [
            "-c:v", "libx265", "-preset", "medium", "-crf", "23", "-b:v", "4000k",
        ]  # fmt: skip

    def test_bitrate_replaces_zero_bitrate_for_vpx(self) -> None:
        plan = _plan(StreamDecision.ENCODE, video_encoder="libvpx")
        args = build_video_args(plan, ConversionSettings(bitrate_kbps=800))

        assert args[-2:] == ["-b:v", "800k"]
        assert "0" not in args

    def test_two_pass_warns_and_runs_single_pass(self, caplog) -> None:
        plan = _plan(StreamDecision.ENCODE, video_encoder="libx264")

        with caplog.at_level(logging.WARNING):
            args = build_video_args(plan, ConversionSettings(two_pass=True))

        assert "-pass" not in args
        assert "Two-pass encoding requested" in caplog.text


class TestBuildAudioArgs:
    """Audio option rules."""

    def test_copy(self) -> None:
        assert build_audio_args(_plan()) == ["-c:a", "copy"]

    def test_encode(self) -> None:
        plan = _plan(audio=StreamDecision.ENCODE, audio_encoder="libmp3lame")
        assert build_audio_args(plan) == ["-c:a", "libmp3lame"]

    def test_drop(self) -> None:
        assert build_audio_args(_plan(audio=StreamDecision.DROP)) == ["-an"]

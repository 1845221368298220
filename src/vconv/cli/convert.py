"""CLI convert command."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

import click

from vconv.cli.exit_codes import ExitCode, exit_code_for_error
from vconv.config.models import VConvConfig
from vconv.config.presets import PresetValidationError, load_preset
from vconv.core.codecs import (
    AudioCodecChoice,
    ContainerFormat,
    SpeedPreset,
    VideoCodecChoice,
)
from vconv.core.formatting import format_duration, format_file_size
from vconv.executor.transcode.command import build_ffmpeg_command
from vconv.executor.transcode.decisions import plan_conversion
from vconv.executor.transcode.types import MAX_CRF, MIN_CRF, ConversionSettings
from vconv.introspector.ffprobe import FFprobeProber
from vconv.jobs.exceptions import ConversionError, ConversionFailedError
from vconv.jobs.models import JobResult, JobState
from vconv.jobs.orchestrator import ConversionOrchestrator
from vconv.jobs.progress import LoggingJobObserver, StderrProgressReporter

logger = logging.getLogger(__name__)

FORMAT_CHOICES = [f.value for f in ContainerFormat]


def build_settings(
    config: VConvConfig,
    base: ConversionSettings | None = None,
    **overrides: Any,
) -> ConversionSettings:
    """Merge configured defaults, an optional preset and CLI overrides.

    Args:
        config: Loaded configuration supplying defaults.
        base: Settings from a preset file; replaces configured defaults.
        **overrides: CLI values; None means "not given".

    Returns:
        Final ConversionSettings.

    Raises:
        ValueError: If the merged settings are invalid.
    """
    if base is None:
        base = ConversionSettings(
            preset=config.conversion.preset,
            crf=config.conversion.crf,
            include_subtitles=config.conversion.include_subtitles,
        )
    given = {key: value for key, value in overrides.items() if value is not None}
    return dataclasses.replace(base, **given)


async def run_conversion(
    orchestrator: ConversionOrchestrator,
    input_path: Path,
    target: ContainerFormat,
    settings: ConversionSettings,
) -> JobResult:
    """Run a conversion, cancelling it on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, orchestrator.cancel)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform or outside the main thread
            pass
    try:
        return await orchestrator.convert(target, settings, input_path=input_path)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def _dry_run(
    config: VConvConfig,
    input_path: Path,
    target: ContainerFormat,
    settings: ConversionSettings,
    json_output: bool,
) -> None:
    """Probe and plan without running ffmpeg."""
    from vconv.core.file_utils import resolve_output_path, working_path_for

    locator = config.tool_locator()
    try:
        probe = FFprobeProber(locator=locator).probe(input_path)
        ffmpeg_path = locator.require("ffmpeg")
    except ConversionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(exit_code_for_error(e))

    plan = plan_conversion(probe, target, settings)
    output_path = resolve_output_path(
        input_path,
        target.extension,
        overwrite_original=settings.overwrite_original,
        output_directory=settings.output_directory,
    )
    working_path = working_path_for(output_path, input_path, target.extension)
    cmd = build_ffmpeg_command(ffmpeg_path, plan, settings, input_path, working_path)

    if json_output:
        click.echo(
            json.dumps(
                {
                    "input": str(input_path),
                    "output": str(output_path),
                    "video": plan.video.value,
                    "audio": plan.audio.value,
                    "classification": plan.classification.value,
                    "command": cmd,
                },
                indent=2,
            )
        )
        return

    click.echo(f"Input:   {input_path}")
    click.echo(f"Output:  {output_path}")
    click.echo(f"Video:   {probe.video_codec} -> {plan.video.value}")
    click.echo(f"Audio:   {probe.audio_codec or 'none'} -> {plan.audio.value}")
    click.echo(f"Plan:    {plan.initial_status}")
    click.echo(f"Command: {' '.join(cmd)}")


def _report_result(result: JobResult, json_output: bool) -> None:
    snapshot = result.snapshot
    if json_output:
        payload: dict[str, Any] = {
            "state": snapshot.state.value,
            "input": str(snapshot.input_path) if snapshot.input_path else None,
            "output": str(result.output_path) if result.output_path else None,
            "exit_code": snapshot.exit_code,
            "elapsed_seconds": snapshot.elapsed_seconds,
        }
        if snapshot.error is not None:
            payload["error"] = {
                "kind": snapshot.error.kind.value,
                "message": str(snapshot.error),
            }
        click.echo(json.dumps(payload, indent=2))
        return

    if result.succeeded and result.output_path is not None:
        size = format_file_size(result.output_path.stat().st_size)
        elapsed = format_duration(snapshot.elapsed_seconds or 0)
        click.echo(f"Converted: {result.output_path} ({size}, {elapsed})")
    elif snapshot.state is JobState.CANCELLED:
        click.echo("Conversion cancelled.", err=True)
    elif snapshot.error is not None:
        click.echo(f"Error: {snapshot.error}", err=True)
        error = snapshot.error
        if isinstance(error, ConversionFailedError) and error.output_tail:
            click.echo(error.output_tail, err=True)


@click.command("convert")
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--to",
    "target",
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
    default=None,
    help="Destination container format.",
)
@click.option(
    "--settings",
    "settings_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings preset. Command-line options override it.",
)
@click.option(
    "--overwrite/--no-overwrite",
    default=None,
    help="Replace the input file with the converted output.",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write output here instead of beside the input.",
)
@click.option("--video/--no-video", "include_video", default=None, help="Keep video.")
@click.option("--audio/--no-audio", "include_audio", default=None, help="Keep audio.")
@click.option(
    "--subtitles/--no-subtitles",
    "include_subtitles",
    default=None,
    help="Keep subtitles.",
)
@click.option(
    "--video-codec",
    type=click.Choice([c.value for c in VideoCodecChoice], case_sensitive=False),
    default=None,
    help="Video codec (auto copies when the container allows it).",
)
@click.option(
    "--audio-codec",
    type=click.Choice([c.value for c in AudioCodecChoice], case_sensitive=False),
    default=None,
    help="Audio codec (auto copies when the container allows it).",
)
@click.option(
    "--preset",
    type=click.Choice([p.value for p in SpeedPreset], case_sensitive=False),
    default=None,
    help="Encoder speed preset.",
)
@click.option(
    "--crf",
    type=click.IntRange(MIN_CRF, MAX_CRF),
    default=None,
    help=f"Quality, {MIN_CRF} (best) to {MAX_CRF}.",
)
@click.option(
    "--bitrate",
    "bitrate_kbps",
    type=click.IntRange(min=1),
    default=None,
    help="Video bitrate in kbit/s (only when video is encoded).",
)
@click.option(
    "--two-pass/--single-pass",
    "two_pass",
    default=None,
    help="Request two-pass encoding (runs a single pass).",
)
@click.option("--dry-run", is_flag=True, help="Show the plan and command only.")
@click.option("--quiet", "-q", is_flag=True, help="Do not show progress.")
@click.option("--json", "json_output", is_flag=True, help="Output result as JSON.")
@click.pass_context
def convert_command(
    ctx: click.Context,
    input_file: Path,
    target: str | None,
    settings_file: Path | None,
    overwrite: bool | None,
    output_dir: Path | None,
    include_video: bool | None,
    include_audio: bool | None,
    include_subtitles: bool | None,
    video_codec: str | None,
    audio_codec: str | None,
    preset: str | None,
    crf: int | None,
    bitrate_kbps: int | None,
    two_pass: bool | None,
    dry_run: bool,
    quiet: bool,
    json_output: bool,
) -> None:
    """Convert INPUT_FILE to another container format.

    Streams the destination container already supports are copied;
    the rest are re-encoded. Press Ctrl+C to cancel; the partial output
    is removed.
    """
    config: VConvConfig = ctx.obj["config"]

    base_settings: ConversionSettings | None = None
    preset_target: ContainerFormat | None = None
    if settings_file is not None:
        try:
            preset_model = load_preset(settings_file)
        except PresetValidationError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(ExitCode.SETTINGS_VALIDATION_ERROR)
        base_settings = preset_model.to_settings()
        preset_target = preset_model.target_format

    if target is not None:
        target_format = ContainerFormat.from_string(target)
    elif preset_target is not None:
        target_format = preset_target
    else:
        raise click.UsageError("Missing option '--to' (or 'target' in --settings).")

    try:
        settings = build_settings(
            config,
            base_settings,
            overwrite_original=overwrite,
            output_directory=output_dir,
            include_video=include_video,
            include_audio=include_audio,
            include_subtitles=include_subtitles,
            video_codec=VideoCodecChoice(video_codec.lower()) if video_codec else None,
            audio_codec=AudioCodecChoice(audio_codec.lower()) if audio_codec else None,
            preset=SpeedPreset(preset.lower()) if preset else None,
            crf=crf,
            bitrate_kbps=bitrate_kbps,
            two_pass=two_pass,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.SETTINGS_VALIDATION_ERROR)

    if settings.output_directory is not None and not settings.output_directory.is_dir():
        click.echo(
            f"Error: output directory does not exist: {settings.output_directory}",
            err=True,
        )
        sys.exit(ExitCode.SETTINGS_VALIDATION_ERROR)

    input_path = input_file.resolve()

    if dry_run:
        _dry_run(config, input_path, target_format, settings, json_output)
        return

    observers = [
        LoggingJobObserver(),
        StderrProgressReporter(enabled=not (quiet or json_output)),
    ]
    orchestrator = ConversionOrchestrator(
        locator=config.tool_locator(), observers=observers
    )
    result = asyncio.run(
        run_conversion(orchestrator, input_path, target_format, settings)
    )

    _report_result(result, json_output)

    if result.succeeded:
        return
    if result.state is JobState.CANCELLED:
        sys.exit(ExitCode.CANCELLED)
    if result.error is not None:
        sys.exit(exit_code_for_error(result.error))
    sys.exit(ExitCode.GENERAL_ERROR)

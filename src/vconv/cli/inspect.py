"""CLI inspect command."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from vconv.cli.exit_codes import exit_code_for_error
from vconv.core.codecs import ContainerFormat
from vconv.executor.transcode.decisions import plan_conversion
from vconv.executor.transcode.types import ConversionSettings
from vconv.introspector.ffprobe import FFprobeProber
from vconv.jobs.exceptions import ConversionError

logger = logging.getLogger(__name__)


@click.command("inspect")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--to",
    "target",
    type=click.Choice([f.value for f in ContainerFormat], case_sensitive=False),
    default=None,
    help="Also show what converting to this format would copy or encode.",
)
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON.")
@click.pass_context
def inspect_command(
    ctx: click.Context, file: Path, target: str | None, json_output: bool
) -> None:
    """Show the codecs of FILE and, with --to, the conversion plan.

    Nothing is written.
    """
    config = ctx.obj["config"]
    prober = FFprobeProber(locator=config.tool_locator())

    try:
        probe = prober.probe(file)
    except ConversionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(exit_code_for_error(e))

    plan = None
    if target is not None:
        fmt = ContainerFormat.from_string(target)
        defaults = config.conversion
        plan = plan_conversion(
            probe,
            fmt,
            ConversionSettings(
                preset=defaults.preset,
                crf=defaults.crf,
                include_subtitles=defaults.include_subtitles,
            ),
        )

    if json_output:
        data: dict[str, Any] = {
            "file": str(file),
            "video_codec": probe.video_codec,
            "audio_codec": probe.audio_codec or None,
            "streams": [
                {"index": s.index, "type": s.kind, "codec": s.codec}
                for s in probe.streams
            ],
        }
        if plan is not None:
            data["plan"] = {
                "target": plan.target.value,
                "video": plan.video.value,
                "audio": plan.audio.value,
                "video_encoder": plan.video_encoder,
                "audio_encoder": plan.audio_encoder,
                "classification": plan.classification.value,
            }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"File: {file}")
    click.echo("")
    click.echo("Streams:")
    for stream in probe.streams:
        click.echo(f"  #{stream.index}  {stream.kind:<10} {stream.codec or '-'}")

    if plan is not None:
        click.echo("")
        click.echo(f"Converting to {plan.target.display_name}:")
        video = plan.video.value
        if plan.video_encoder:
            video += f" ({plan.video_encoder})"
        audio = plan.audio.value
        if plan.audio_encoder:
            audio += f" ({plan.audio_encoder})"
        click.echo(f"  Video: {video}")
        click.echo(f"  Audio: {audio}")
        click.echo(f"  {plan.initial_status}")

"""CLI formats command: the container compatibility table."""

import json

import click

from vconv.core.codecs import FORMAT_SPECS


@click.command("formats")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON.")
def formats_command(json_output: bool) -> None:
    """List supported formats and the codecs each can take without encoding."""
    if json_output:
        data = {
            fmt.value: {
                "extension": spec.extension,
                "video_codecs": list(spec.video_codecs),
                "audio_codecs": list(spec.audio_codecs),
                "default_video_encoder": spec.default_video_encoder,
                "default_audio_encoder": spec.default_audio_encoder,
            }
            for fmt, spec in FORMAT_SPECS.items()
        }
        click.echo(json.dumps(data, indent=2))
        return

    for fmt, spec in FORMAT_SPECS.items():
        click.echo(f"{fmt.display_name} (.{spec.extension})")
        click.echo(f"  copy video: {', '.join(spec.video_codecs)}")
        click.echo(f"  copy audio: {', '.join(spec.audio_codecs)}")
        click.echo(
            f"  encoders:   {spec.default_video_encoder} / "
            f"{spec.default_audio_encoder}"
        )

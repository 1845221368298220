"""vconv doctor command for checking external tool health."""

import json
import sys

import click

from vconv.cli.exit_codes import ExitCode
from vconv.tools.detection import ToolInfo, detect_all_tools


def _format_status(info: ToolInfo) -> str:
    return "✓" if info.is_available else "✗"


@click.command("doctor")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON.")
@click.pass_context
def doctor_command(ctx: click.Context, json_output: bool) -> None:
    """Check that ffmpeg and ffprobe can be found and run.

    Exit codes:
      0  - Both tools available
      30 - A tool is missing or broken
    """
    config = ctx.obj["config"]
    locator = config.tool_locator()
    results = detect_all_tools(locator)

    if json_output:
        data = {
            name: {
                "status": info.status.value,
                "path": str(info.path) if info.path else None,
                "version": info.version,
                "message": info.message,
            }
            for name, info in results.items()
        }
        click.echo(json.dumps(data, indent=2))
    else:
        for name, info in results.items():
            line = f"{_format_status(info)} {name:<8}"
            if info.path:
                line += f" {info.path}"
            if info.version:
                line += f" (version {info.version})"
            if info.message:
                line += f" - {info.message}"
            click.echo(line)
        if not all(info.is_available for info in results.values()):
            searched = ", ".join(str(d) for d in locator.search_dirs)
            click.echo("")
            click.echo(f"Searched: configured paths, {searched}, then PATH.")

    if not all(info.is_available for info in results.values()):
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)

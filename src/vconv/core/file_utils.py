"""Output path resolution and partial-output cleanup.

Conversions never write over an existing file unless the caller asked to
overwrite the original. In that case ffmpeg writes to a hidden working file
next to the input, which only replaces the input once ffmpeg succeeds.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

CONVERTED_SUFFIX = "_converted"
PARTIAL_MARKER = ".vconv-partial"


def resolve_output_path(
    input_path: Path,
    extension: str,
    *,
    overwrite_original: bool = False,
    output_directory: Path | None = None,
) -> Path:
    """Pick the destination path for a conversion.

    Candidates are ``<stem>_converted.<ext>`` followed by
    ``<stem>_converted_1.<ext>``, ``<stem>_converted_2.<ext>`` and so on,
    placed in output_directory when given, otherwise beside the input. The
    first candidate that does not exist is returned.

    Args:
        input_path: Source file.
        extension: Target extension without the dot.
        overwrite_original: Return the input path itself.
        output_directory: Directory for the output instead of the input's.

    Returns:
        Path the finished output should end up at.
    """
    if overwrite_original:
        return input_path

    directory = output_directory if output_directory is not None else input_path.parent
    stem = f"{input_path.stem}{CONVERTED_SUFFIX}"

    candidate = directory / f"{stem}.{extension}"
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{counter}.{extension}"
        counter += 1
    return candidate


def working_path_for(output_path: Path, input_path: Path, extension: str) -> Path:
    """Return the path ffmpeg should write to.

    When the output would replace the input, ffmpeg cannot write in place
    while reading the same file, so a hidden sibling carrying the target
    extension is used instead. Otherwise the output path is used directly.
    """
    if output_path != input_path:
        return output_path
    return input_path.with_name(f".{input_path.stem}{PARTIAL_MARKER}.{extension}")


def promote_working_file(working_path: Path, output_path: Path) -> None:
    """Move a finished working file into its final place.

    Raises:
        OSError: If the rename fails.
    """
    if working_path == output_path:
        return
    os.replace(working_path, output_path)
    logger.debug("Replaced %s with converted output", output_path)


def remove_partial_output(path: Path) -> bool:
    """Delete an incomplete output file, logging instead of raising.

    Args:
        path: File to remove.

    Returns:
        True if a file was removed.
    """
    if not path.exists():
        return False
    try:
        path.unlink()
        logger.debug("Removed partial output: %s", path)
        return True
    except OSError as e:
        logger.warning("Could not remove partial output %s: %s", path, e)
        return False

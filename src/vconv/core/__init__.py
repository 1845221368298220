"""Core utilities package.

Pure helpers shared across the codebase: the container compatibility
table, output path handling and subprocess invocation.
"""

from vconv.core.codecs import (
    FORMAT_SPECS,
    AudioCodecChoice,
    ContainerFormat,
    FormatSpec,
    SpeedPreset,
    StreamKind,
    VideoCodecChoice,
    accepted_codecs,
    can_copy,
    default_encoder,
    get_format_spec,
)
from vconv.core.file_utils import (
    promote_working_file,
    remove_partial_output,
    resolve_output_path,
    working_path_for,
)
from vconv.core.formatting import format_duration, format_file_size

__all__ = [
    "FORMAT_SPECS",
    "AudioCodecChoice",
    "ContainerFormat",
    "FormatSpec",
    "SpeedPreset",
    "StreamKind",
    "VideoCodecChoice",
    "accepted_codecs",
    "can_copy",
    "default_encoder",
    "format_duration",
    "format_file_size",
    "get_format_spec",
    "promote_working_file",
    "remove_partial_output",
    "resolve_output_path",
    "working_path_for",
]

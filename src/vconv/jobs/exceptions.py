"""Error kinds surfaced by conversion jobs.

Every failure a job can end in maps to one of these classes. They are
terminal: the orchestrator never retries, it records the error on the job
result and the caller decides what to show.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from pathlib import Path


class ErrorKind(Enum):
    """Machine-readable error category."""

    TOOL_NOT_FOUND = "tool_not_found"
    INVALID_INPUT = "invalid_input"
    PROBE_FAILED = "probe_failed"
    CONVERSION_FAILED = "conversion_failed"


class ConversionError(Exception):
    """Base exception for conversion job errors.

    All job errors inherit from this class, allowing callers to catch them
    with a single except clause.
    """

    kind: ErrorKind


class ToolNotFoundError(ConversionError):
    """Raised when ffmpeg or ffprobe cannot be located.

    Attributes:
        tool: Name of the missing tool.
        searched: Locations that were checked, in order.
    """

    kind = ErrorKind.TOOL_NOT_FOUND

    def __init__(self, tool: str, searched: Sequence[Path] = ()) -> None:
        self.tool = tool
        self.searched = tuple(searched)
        super().__init__(
            f"{tool} is not installed. Install it with your package manager "
            f"(e.g. 'brew install ffmpeg' or 'apt install ffmpeg'), or set "
            f"VCONV_{tool.upper()}_PATH to its location."
        )


class InvalidInputError(ConversionError):
    """Raised when no usable input file was provided."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str = "Invalid input file") -> None:
        super().__init__(message)


class ProbeFailedError(ConversionError):
    """Raised when the source codecs cannot be determined.

    Attributes:
        detail: Underlying reason, if known.
    """

    kind = ErrorKind.PROBE_FAILED

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        message = "Failed to detect video/audio codecs"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConversionFailedError(ConversionError):
    """Raised when ffmpeg could not be started or exited unsuccessfully.

    Attributes:
        detail: Short description, e.g. "Process exited with code 1".
        exit_code: ffmpeg's exit status, or None if it never ran.
        output_tail: Last lines of ffmpeg output for diagnosis.
    """

    kind = ErrorKind.CONVERSION_FAILED

    def __init__(
        self,
        detail: str,
        exit_code: int | None = None,
        output_tail: str = "",
    ) -> None:
        self.detail = detail
        self.exit_code = exit_code
        self.output_tail = output_tail
        super().__init__(f"Conversion failed: {detail}")

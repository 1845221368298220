"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (settings, config)
    20-29: Input errors
    30-39: Tool/dependency errors
    40-49: Conversion errors
    50-59: Probe errors
"""

from enum import IntEnum

from vconv.jobs.exceptions import ConversionError, ErrorKind


class ExitCode(IntEnum):
    """Exit codes for vconv CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    CANCELLED = 2  # Ctrl+C / SIGINT (conventionally 130, but we use 2 for simplicity)

    # Validation errors (10-19)
    SETTINGS_VALIDATION_ERROR = 10
    CONFIG_ERROR = 11

    # Input errors (20-29)
    INVALID_INPUT = 20

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Conversion errors (40-49)
    CONVERSION_FAILED = 40

    # Probe errors (50-59)
    PROBE_FAILED = 51


_ERROR_EXIT_CODES: dict[ErrorKind, ExitCode] = {
    ErrorKind.TOOL_NOT_FOUND: ExitCode.TOOL_NOT_AVAILABLE,
    ErrorKind.INVALID_INPUT: ExitCode.INVALID_INPUT,
    ErrorKind.PROBE_FAILED: ExitCode.PROBE_FAILED,
    ErrorKind.CONVERSION_FAILED: ExitCode.CONVERSION_FAILED,
}


def exit_code_for_error(error: ConversionError) -> ExitCode:
    """Map a job error to the CLI exit code."""
    return _ERROR_EXIT_CODES.get(error.kind, ExitCode.GENERAL_ERROR)

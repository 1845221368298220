"""Conversion jobs: lifecycle, errors and observers.

Only the exception types are re-exported here because the prober and tool
locator import them. Import the orchestrator, models and observers from
their submodules.
"""

from vconv.jobs.exceptions import (
    ConversionError,
    ConversionFailedError,
    ErrorKind,
    InvalidInputError,
    ProbeFailedError,
    ToolNotFoundError,
)

__all__ = [
    "ConversionError",
    "ConversionFailedError",
    "ErrorKind",
    "InvalidInputError",
    "ProbeFailedError",
    "ToolNotFoundError",
]

"""Job context for structured logging.

Carries the current job id and input path in contextvars so every record
logged while a job runs is tagged with them. asyncio tasks copy the context
when created, so setting it inside the job task scopes it to that job.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_input_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "input_path", default=None
)


def set_job_context(job_id: str, input_path: Path | str | None = None) -> None:
    """Set the current job context.

    Args:
        job_id: Short job identifier.
        input_path: Source file of the job, or None.
    """
    _job_id.set(job_id)
    _input_path.set(str(input_path) if input_path is not None else None)


def clear_job_context() -> None:
    """Clear the current job context."""
    _job_id.set(None)
    _input_path.set(None)


@contextmanager
def job_context(
    job_id: str, input_path: Path | str | None = None
) -> Generator[None, None, None]:
    """Context manager for job processing context.

    Example:
        with job_context("a1b2c3d4", "/videos/movie.mov"):
            logger.info("Probing")  # Record carries job_id and input_path
    """
    old_job_id = _job_id.get()
    old_input_path = _input_path.get()
    try:
        set_job_context(job_id, input_path)
        yield
    finally:
        _job_id.set(old_job_id)
        _input_path.set(old_input_path)


def get_job_context() -> tuple[str | None, str | None]:
    """Return (job_id, input_path) for the current context."""
    return _job_id.get(), _input_path.get()


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds job_id and input_path attributes for JSON output and a compact
    job_tag such as "[a1b2c3d4] " for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        job_id, input_path = get_job_context()
        record.job_id = job_id
        record.input_path = input_path
        record.job_tag = f"[{job_id}] " if job_id else ""
        return True  # Never filter out records

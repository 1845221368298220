"""FFmpeg progress parsing utilities.

ffmpeg reports progress as free-form text on stderr. Two markers matter:

- ``Duration: HH:MM:SS.cc`` printed once in the input summary.
- ``time=HH:MM:SS.cc`` repeated on every stats line.

The parser caches the first non-zero duration it sees in a ProgressState owned by the
caller and turns each later ``time=`` marker into a fraction, an estimated
time remaining, and a status line. Chunks without usable markers produce no
update.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field

from vconv.core.formatting import format_remaining

# Progress never reaches 1.0 from parsing alone; only success sets it.
MAX_PARSED_FRACTION = 0.99

DURATION_PATTERN = re.compile(r"Duration: (\d{2}):(\d{2}):(\d{2})\.(\d{2})")
TIME_PATTERN = re.compile(r"time=(\d{2}):(\d{2}):(\d{2})\.(\d{2})")


@dataclass
class ProgressState:
    """Per-job parser state.

    Attributes:
        started_at: Monotonic clock reading when the job started running.
        duration_seconds: Source duration, set from the first Duration line
            with a non-zero value.
    """

    started_at: float = field(default_factory=time.monotonic)
    duration_seconds: float | None = None


@dataclass(frozen=True)
class ProgressUpdate:
    """A progress observation derived from one chunk of output."""

    fraction: float
    status: str
    current_seconds: float
    remaining_seconds: float | None = None


def _to_seconds(match: re.Match[str]) -> float:
    hours, minutes, seconds, centiseconds = (int(g) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds + centiseconds / 100


def parse_timestamp(text: str) -> float | None:
    """Parse an ``HH:MM:SS.cc`` timestamp into seconds.

    Returns:
        Seconds, or None if the text is not in that exact shape.
    """
    match = re.fullmatch(r"(\d{2}):(\d{2}):(\d{2})\.(\d{2})", text.strip())
    if not match:
        return None
    return _to_seconds(match)


def parse_duration(text: str) -> float | None:
    """Find the first ``Duration:`` marker in text."""
    match = DURATION_PATTERN.search(text)
    return _to_seconds(match) if match else None


def parse_current_time(text: str) -> float | None:
    """Find the last ``time=`` marker in text."""
    last = None
    for last in TIME_PATTERN.finditer(text):
        pass
    return _to_seconds(last) if last else None


def parse_progress(
    text: str,
    state: ProgressState,
    action: str,
    full_remux: bool = False,
    now: float | None = None,
) -> ProgressUpdate | None:
    """Derive a progress update from a chunk of ffmpeg output.

    Args:
        text: One or more lines of ffmpeg output.
        state: Parser state for this job. The duration is cached here the
            first time a non-zero Duration marker is seen.
        action: Verb for the status line, e.g. "Encoding video".
        full_remux: Whether no stream is being re-encoded. Chooses the
            fallback status when no estimate is available.
        now: Monotonic clock reading. Defaults to time.monotonic().

    Returns:
        ProgressUpdate, or None when the chunk carries no usable time marker
        or the duration is still unknown.
    """
    if not state.duration_seconds:
        duration = parse_duration(text)
        if duration:
            state.duration_seconds = duration

    current = parse_current_time(text)
    duration = state.duration_seconds
    if current is None or not duration:
        return None

    fraction = min(current / duration, MAX_PARSED_FRACTION)
    elapsed = (now if now is not None else time.monotonic()) - state.started_at

    remaining: float | None = None
    if fraction > 0:
        remaining = elapsed / fraction - elapsed

    if remaining is not None and remaining > 0:
        status = f"{action}... {format_remaining(remaining)} remaining"
    elif full_remux:
        status = "Remuxing..."
    else:
        status = "Processing..."

    return ProgressUpdate(
        fraction=fraction,
        status=status,
        current_seconds=current,
        remaining_seconds=remaining,
    )

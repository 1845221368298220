"""Job observers for CLI and logging.

The orchestrator publishes a JobSnapshot after every state or progress
change. Observers are called on the event loop and must not block.
"""

from __future__ import annotations

import logging
import sys
from typing import Protocol, TextIO

from vconv.jobs.models import JobSnapshot, JobState

logger = logging.getLogger(__name__)


class JobObserver(Protocol):
    """Protocol for receiving job updates.

    Implementations provide context-specific display:
    - CLI: in-place stderr progress line
    - Logs: state transitions
    - Tests: recorded snapshots
    """

    def on_update(self, snapshot: JobSnapshot) -> None:
        """Receive the latest job snapshot.

        Args:
            snapshot: Immutable job state after the change.
        """
        ...


class StderrProgressReporter:
    """Observer that renders a single in-place progress line.

    Suitable for interactive CLI use. Terminal states end the line.
    """

    def __init__(
        self,
        enabled: bool = True,
        stream: TextIO | None = None,
        bar_width: int = 30,
    ) -> None:
        """Initialize stderr progress reporter.

        Args:
            enabled: If False, suppresses output (for JSON mode or tests).
            stream: Output stream, defaults to sys.stderr.
            bar_width: Width of the progress bar in characters.
        """
        self.enabled = enabled
        self._stream = stream
        self._bar_width = bar_width
        self._last_line = ""

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def render(self, snapshot: JobSnapshot) -> str:
        filled = int(round(snapshot.progress * self._bar_width))
        bar = "#" * filled + "-" * (self._bar_width - filled)
        percent = int(snapshot.progress * 100)
        return f"[{bar}] {percent:3d}% {snapshot.status}"

    def on_update(self, snapshot: JobSnapshot) -> None:
        if not self.enabled or snapshot.state is JobState.IDLE:
            return

        line = self.render(snapshot)
        # Pad to erase leftovers from a longer previous line
        padding = " " * max(0, len(self._last_line) - len(line))
        self.stream.write(f"\r{line}{padding}")
        self._last_line = line

        if snapshot.state.is_terminal:
            self.stream.write("\n")
            self._last_line = ""
        self.stream.flush()


class LoggingJobObserver:
    """Observer that logs state transitions, ignoring pure progress ticks."""

    def __init__(self) -> None:
        self._last_state: JobState | None = None

    def on_update(self, snapshot: JobSnapshot) -> None:
        if snapshot.state is self._last_state:
            return
        self._last_state = snapshot.state
        logger.info(
            "Job %s %s: %s",
            snapshot.job_id,
            snapshot.state.value,
            snapshot.status,
            extra={"job_state": snapshot.state.value},
        )

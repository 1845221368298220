"""Conversion job state and snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from vconv.executor.transcode.types import ConversionPlan
from vconv.jobs.exceptions import ConversionError


class JobState(Enum):
    """Lifecycle state of a conversion job.

    IDLE -> PROBING -> PLANNING -> RUNNING -> SUCCEEDED | FAILED | CANCELLED.
    Any non-terminal state may move to FAILED or CANCELLED.
    """

    IDLE = "idle"
    PROBING = "probing"
    PLANNING = "planning"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES

    @property
    def is_active(self) -> bool:
        return self in (JobState.PROBING, JobState.PLANNING, JobState.RUNNING)


_TERMINAL_STATES = frozenset({JobState.SUCCEEDED, JobState.FAILED, JobState.CANCELLED})


@dataclass(frozen=True)
class JobSnapshot:
    """Immutable view of a job published to observers and returned to callers.

    Attributes:
        job_id: Short identifier used in logs.
        state: Lifecycle state.
        progress: Completion fraction in [0, 1].
        status: Human-readable status line.
        input_path: Source file.
        output_path: Final destination, once planned.
        plan: Stream decisions, once planned.
        started_at: UTC time the job left IDLE.
        finished_at: UTC time the job reached a terminal state.
        exit_code: ffmpeg exit status, once it exited.
        error: Terminal error for FAILED jobs.
    """

    job_id: str
    state: JobState = JobState.IDLE
    progress: float = 0.0
    status: str = ""
    input_path: Path | None = None
    output_path: Path | None = None
    plan: ConversionPlan | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    exit_code: int | None = None
    error: ConversionError | None = None

    @property
    def elapsed_seconds(self) -> float | None:
        if self.started_at is None:
            return None
        end = self.finished_at or datetime.now(self.started_at.tzinfo)
        return (end - self.started_at).total_seconds()


@dataclass(frozen=True)
class JobResult:
    """Terminal outcome of ``ConversionOrchestrator.convert``."""

    snapshot: JobSnapshot

    @property
    def state(self) -> JobState:
        return self.snapshot.state

    @property
    def succeeded(self) -> bool:
        return self.snapshot.state is JobState.SUCCEEDED

    @property
    def output_path(self) -> Path | None:
        return self.snapshot.output_path if self.succeeded else None

    @property
    def error(self) -> ConversionError | None:
        return self.snapshot.error

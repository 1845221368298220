"""Tests for job observers, snapshots and output buffering."""

import io
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from vconv.jobs.models import JobResult, JobSnapshot, JobState
from vconv.jobs.orchestrator import LineSplitter, OutputTail
from vconv.jobs.progress import LoggingJobObserver, StderrProgressReporter


class TestJobState:
    """Tests for JobState helpers."""

    def test_terminal_states(self) -> None:
        terminal = {s for s in JobState if s.is_terminal}
        assert terminal == {JobState.SUCCEEDED, JobState.FAILED, JobState.CANCELLED}

    def test_active_states(self) -> None:
        assert JobState.RUNNING.is_active
        assert not JobState.IDLE.is_active
        assert not JobState.FAILED.is_active


class TestJobSnapshot:
    """Tests for JobSnapshot and JobResult."""

    def test_elapsed_seconds(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        snapshot = JobSnapshot(
            job_id="a", started_at=start, finished_at=start + timedelta(seconds=90)
        )
        assert snapshot.elapsed_seconds == 90.0

    def test_elapsed_none_before_start(self) -> None:
        assert JobSnapshot(job_id="a").elapsed_seconds is None

    def test_result_hides_output_unless_succeeded(self) -> None:
        failed = JobSnapshot(
            job_id="a", state=JobState.FAILED, output_path=Path("/x.mp4")
        )
        done = JobSnapshot(
            job_id="b", state=JobState.SUCCEEDED, output_path=Path("/x.mp4")
        )

        assert JobResult(failed).output_path is None
        assert JobResult(done).output_path == Path("/x.mp4")


class TestStderrProgressReporter:
    """Tests for the in-place progress line."""

    def test_render(self) -> None:
        reporter = StderrProgressReporter(bar_width=10)
        snapshot = JobSnapshot(
            job_id="a", state=JobState.RUNNING, progress=0.5, status="Remuxing..."
        )
        assert reporter.render(snapshot) == "[#####-----]  50% Remuxing..."

    def test_terminal_state_ends_line(self) -> None:
        stream = io.StringIO()
        reporter = StderrProgressReporter(stream=stream, bar_width=4)

        reporter.on_update(
            JobSnapshot(job_id="a", state=JobState.RUNNING, status="long status")
        )
        reporter.on_update(
            JobSnapshot(job_id="a", state=JobState.SUCCEEDED, progress=1.0)
        )

        output = stream.getvalue()
        assert output.startswith("\r[----]   0% long status")
        assert output.endswith("\n")
        # The shorter final line is padded over the previous one
        final = output.split("\r")[-1].rstrip("\n")
        assert len(final) == len("[----]   0% long status")

    def test_disabled_writes_nothing(self) -> None:
        stream = io.StringIO()
        reporter = StderrProgressReporter(enabled=False, stream=stream)

        reporter.on_update(JobSnapshot(job_id="a", state=JobState.RUNNING))

        assert stream.getvalue() == ""

    def test_idle_is_ignored(self) -> None:
        stream = io.StringIO()
        StderrProgressReporter(stream=stream).on_update(JobSnapshot(job_id="a"))
        assert stream.getvalue() == ""


class TestLoggingJobObserver:
    """Tests for LoggingJobObserver."""

    def test_logs_state_changes_only(self, caplog) -> None:
        observer = LoggingJobObserver()

        with caplog.at_level(logging.INFO, logger="vconv.jobs.progress"):
            observer.on_update(JobSnapshot(job_id="j1", state=JobState.RUNNING))
            observer.on_update(
                JobSnapshot(job_id="j1", state=JobState.RUNNING, progress=0.5)
            )
            observer.on_update(JobSnapshot(job_id="j1", state=JobState.SUCCEEDED))

        assert len(caplog.records) == 2
        assert "j1 running" in caplog.records[0].getMessage()


class TestLineSplitter:
    """Tests for LineSplitter."""

    def test_splits_on_cr_and_lf(self) -> None:
        splitter = LineSplitter()
        assert splitter.feed("a\rb\nc\r\nd") == ["a", "b", "c"]
        assert splitter.flush() == ["d"]

    def test_holds_partial_line(self) -> None:
        splitter = LineSplitter()
        assert splitter.feed("time=00:0") == []
        assert splitter.feed("0:01.00\r") == ["time=00:00:01.00"]
        assert splitter.flush() == []


class TestOutputTail:
    """Tests for OutputTail."""

    def test_bounded(self) -> None:
        tail = OutputTail(limit=10)
        for _ in range(5):
            tail.append("abcdef")

        assert len(tail.text) <= 10
        assert tail.text.endswith("abcdef")

    def test_single_oversized_chunk_is_truncated(self) -> None:
        tail = OutputTail(limit=4)
        tail.append("0123456789")
        assert tail.text == "6789"

    def test_last_lines(self) -> None:
        tail = OutputTail()
        tail.append("one\ntwo\r\rthree\n\nfour\n")
        assert tail.last_lines(2) == "three\nfour"

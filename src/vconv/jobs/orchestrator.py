"""Conversion job orchestration.

ConversionOrchestrator drives one conversion at a time through
IDLE -> PROBING -> PLANNING -> RUNNING -> SUCCEEDED | FAILED | CANCELLED.

While ffmpeg runs, a reader task pushes raw output chunks into an
asyncio.Queue. The job task consumes that channel, keeps a bounded tail
of the output for error messages, splits complete lines and feeds them to
the progress parser. Cancellation cancels the job task; the task then
terminates ffmpeg, removes the partial output and records CANCELLED.

All state changes happen on the event loop and are published to observers
as immutable JobSnapshot values.
"""

from __future__ import annotations

import asyncio
import codecs
import dataclasses
import logging
import subprocess  # nosec B404 - DEVNULL/STDOUT constants for ffmpeg invocation
import time
import uuid
from collections import deque
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from vconv.core.codecs import ContainerFormat
from vconv.core.file_utils import (
    promote_working_file,
    remove_partial_output,
    resolve_output_path,
    working_path_for,
)
from vconv.executor.transcode.command import build_ffmpeg_command
from vconv.executor.transcode.decisions import plan_conversion
from vconv.executor.transcode.types import ConversionPlan, ConversionSettings
from vconv.introspector.ffprobe import FFprobeProber
from vconv.introspector.interface import CodecProber
from vconv.jobs.exceptions import (
    ConversionError,
    ConversionFailedError,
    InvalidInputError,
)
from vconv.jobs.models import JobResult, JobSnapshot, JobState
from vconv.jobs.progress import JobObserver
from vconv.logging.context import set_job_context
from vconv.tools.detection import ToolLocator
from vconv.tools.ffmpeg_progress import ProgressState, parse_progress

logger = logging.getLogger(__name__)

STATUS_PROBING = "Detecting codecs..."
STATUS_PLANNING = "Preparing conversion..."
STATUS_SUCCEEDED = "Conversion complete!"
STATUS_CANCELLED = "Cancelled"


class OutputTail:
    """Bounded rolling buffer of recent tool output.

    Keeps at most ``limit`` characters; older text is discarded.
    """

    def __init__(self, limit: int = 16_384) -> None:
        self._limit = limit
        self._chunks: deque[str] = deque()
        self._size = 0

    def append(self, text: str) -> None:
        if not text:
            return
        self._chunks.append(text)
        self._size += len(text)
        while self._size > self._limit and len(self._chunks) > 1:
            self._size -= len(self._chunks.popleft())
        if self._size > self._limit:
            only = self._chunks.pop()[-self._limit :]
            self._chunks.append(only)
            self._size = len(only)

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    def last_lines(self, count: int = 10) -> str:
        """Return the last non-empty lines, newline-joined."""
        lines = [ln for ln in self.text.replace("\r", "\n").split("\n") if ln.strip()]
        return "\n".join(lines[-count:])


class LineSplitter:
    """Splits a text stream into lines terminated by CR or LF.

    ffmpeg rewrites its stats line with carriage returns, so both count as
    line ends. Incomplete trailing text is held until the next feed.
    """

    def __init__(self) -> None:
        self._pending = ""

    def feed(self, text: str) -> list[str]:
        data = self._pending + text
        parts = data.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        self._pending = parts.pop()
        return [part for part in parts if part]

    def flush(self) -> list[str]:
        pending, self._pending = self._pending, ""
        return [pending] if pending else []


class ConversionOrchestrator:
    """Runs conversion jobs and tracks their state.

    Example:
        orchestrator = ConversionOrchestrator(locator=ToolLocator())
        orchestrator.input_path = Path("movie.mov")
        result = await orchestrator.convert(ContainerFormat.MP4, ConversionSettings())
    """

    def __init__(
        self,
        locator: ToolLocator | None = None,
        prober: CodecProber | None = None,
        observers: Iterable[JobObserver] = (),
        termination_grace: float = 5.0,
        read_size: int = 4096,
        tail_limit: int = 16_384,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            locator: Finds the ffmpeg executable (and ffprobe for the
                default prober).
            prober: Codec prober. Defaults to FFprobeProber using locator.
            observers: Receive a snapshot after every change.
            termination_grace: Seconds to wait after SIGTERM before killing
                ffmpeg on cancel.
            read_size: Maximum bytes read from ffmpeg per chunk.
            tail_limit: Characters of ffmpeg output kept for error details.
        """
        self._locator = locator or ToolLocator()
        self._prober = prober or FFprobeProber(locator=self._locator)
        self._observers: list[JobObserver] = list(observers)
        self._termination_grace = termination_grace
        self._read_size = read_size
        self._tail_limit = tail_limit

        self.input_path: Path | None = None
        self._snapshot = JobSnapshot(job_id="")
        self._task: asyncio.Task[JobResult] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._cancel_requested = False
        self._job_started = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def job(self) -> JobSnapshot:
        """Current job snapshot."""
        return self._snapshot

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def convert(
        self,
        target: ContainerFormat,
        settings: ConversionSettings,
        input_path: Path | None = None,
    ) -> JobResult:
        """Run a conversion to completion.

        Args:
            target: Destination container.
            settings: Conversion settings, captured for the whole job.
            input_path: Source file. Defaults to the input_path attribute.

        Returns:
            JobResult in a terminal state. Errors are reported through
            ``result.error`` rather than raised.

        Raises:
            RuntimeError: If a conversion is already running.
        """
        if self.is_running:
            raise RuntimeError("A conversion is already running")
        if input_path is not None:
            self.input_path = Path(input_path)

        job_id = uuid.uuid4().hex[:8]
        self._loop = asyncio.get_running_loop()
        self._cancel_requested = False
        self._job_started = False
        self._snapshot = JobSnapshot(job_id=job_id, input_path=self.input_path)
        self._task = asyncio.create_task(
            self._run(job_id, self.input_path, target, settings),
            name=f"vconv-job-{job_id}",
        )
        return await self._task

    def cancel(self) -> bool:
        """Request cancellation of the running job.

        Returns immediately. Calling it again, or when no job is running,
        has no effect. A request made before the job task has started is
        honoured when it starts.

        Returns:
            True if a cancellation was issued by this call.
        """
        task = self._task
        if task is None or task.done() or self._cancel_requested:
            return False
        self._cancel_requested = True
        logger.info("Cancellation requested for job %s", self._snapshot.job_id)
        if self._job_started:
            task.cancel()
        return True

    def cancel_threadsafe(self) -> None:
        """Request cancellation from a thread other than the event loop's."""
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self.cancel)

    # ------------------------------------------------------------------
    # Job task
    # ------------------------------------------------------------------

    async def _run(
        self,
        job_id: str,
        input_path: Path | None,
        target: ContainerFormat,
        settings: ConversionSettings,
    ) -> JobResult:
        set_job_context(job_id, input_path)
        self._job_started = True
        if self._cancel_requested:
            return self._finish_cancelled()

        process: asyncio.subprocess.Process | None = None
        working_path: Path | None = None

        try:
            if input_path is None:
                return self._finish_failed(InvalidInputError())

            self._publish(
                state=JobState.PROBING,
                status=STATUS_PROBING,
                started_at=datetime.now(timezone.utc),
            )
            ffmpeg_path = self._locator.require("ffmpeg")
            probe = await self._prober.probe_async(input_path)

            self._publish(state=JobState.PLANNING, status=STATUS_PLANNING)
            plan = plan_conversion(probe, target, settings)
            output_path = resolve_output_path(
                input_path,
                target.extension,
                overwrite_original=settings.overwrite_original,
                output_directory=settings.output_directory,
            )
            working_path = working_path_for(output_path, input_path, target.extension)
            if output_path == input_path and input_path.suffix.lstrip(".") != (
                target.extension
            ):
                logger.warning(
                    "Overwriting %s with %s content; the file extension will "
                    "not match the container",
                    input_path.name,
                    target.value,
                )
            cmd = build_ffmpeg_command(
                ffmpeg_path, plan, settings, input_path, working_path
            )

            self._publish(
                state=JobState.RUNNING,
                status=plan.initial_status,
                plan=plan,
                output_path=output_path,
            )
            logger.info(
                "Starting ffmpeg: %s -> %s",
                input_path.name,
                output_path.name,
                extra={"classification": plan.classification.value},
            )
            logger.debug("ffmpeg command: %s", " ".join(cmd))

            try:
                process = await asyncio.create_subprocess_exec(  # nosec B603
                    *cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                )
            except OSError as e:
                remove_partial_output(working_path)
                return self._finish_failed(ConversionFailedError(str(e)))

            tail = await self._consume_output(process, plan)
            exit_code = await process.wait()

            if exit_code != 0:
                remove_partial_output(working_path)
                return self._finish_failed(
                    ConversionFailedError(
                        f"Process exited with code {exit_code}",
                        exit_code=exit_code,
                        output_tail=tail.last_lines(),
                    ),
                    exit_code=exit_code,
                )

            try:
                promote_working_file(working_path, output_path)
            except OSError as e:
                remove_partial_output(working_path)
                return self._finish_failed(
                    ConversionFailedError(f"could not replace original: {e}", 0),
                    exit_code=0,
                )

            return self._finish(
                JobState.SUCCEEDED,
                progress=1.0,
                status=STATUS_SUCCEEDED,
                exit_code=0,
            )

        except ConversionError as e:
            return self._finish_failed(e)

        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None:
                current.uncancel()
            await self._terminate(process)
            if working_path is not None:
                remove_partial_output(working_path)
            return self._finish_cancelled(
                process.returncode if process is not None else None
            )

    async def _consume_output(
        self,
        process: asyncio.subprocess.Process,
        plan: ConversionPlan,
    ) -> OutputTail:
        """Read ffmpeg output until EOF, publishing progress."""
        channel: asyncio.Queue[bytes | None] = asyncio.Queue()
        reader = asyncio.create_task(self._pump(process, channel))

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        splitter = LineSplitter()
        tail = OutputTail(self._tail_limit)
        state = ProgressState(started_at=time.monotonic())

        try:
            while (chunk := await channel.get()) is not None:
                text = decoder.decode(chunk)
                tail.append(text)
                for line in splitter.feed(text):
                    self._handle_line(line, state, plan)
            text = decoder.decode(b"", final=True)
            tail.append(text)
            for line in splitter.feed(text) + splitter.flush():
                self._handle_line(line, state, plan)
        finally:
            if not reader.done():
                reader.cancel()
            for outcome in await asyncio.gather(reader, return_exceptions=True):
                if isinstance(outcome, Exception):
                    logger.warning("ffmpeg output reader failed: %s", outcome)
        return tail

    async def _pump(
        self,
        process: asyncio.subprocess.Process,
        channel: asyncio.Queue[bytes | None],
    ) -> None:
        """Forward raw output chunks into the channel, then a None sentinel."""
        stream = process.stdout
        try:
            if stream is None:
                return
            while chunk := await stream.read(self._read_size):
                channel.put_nowait(chunk)
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.debug("ffmpeg output reader stopped: %s", e)
        finally:
            channel.put_nowait(None)

    def _handle_line(
        self, line: str, state: ProgressState, plan: ConversionPlan
    ) -> None:
        logger.debug("ffmpeg: %s", line)
        update = parse_progress(
            line,
            state,
            plan.action_label,
            full_remux=plan.is_full_remux,
        )
        if update is None:
            return
        self._publish(
            progress=max(self._snapshot.progress, update.fraction),
            status=update.status,
        )

    async def _terminate(self, process: asyncio.subprocess.Process | None) -> None:
        """Stop ffmpeg: SIGTERM, then SIGKILL after the grace period."""
        if process is None or process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=self._termination_grace)
        except TimeoutError:
            logger.warning(
                "ffmpeg did not exit %.1fs after SIGTERM, killing",
                self._termination_grace,
            )
            try:
                process.kill()
            except ProcessLookupError:
                return
            await process.wait()

    # ------------------------------------------------------------------
    # State publication
    # ------------------------------------------------------------------

    def _publish(self, **changes: Any) -> None:
        self._snapshot = dataclasses.replace(self._snapshot, **changes)
        snapshot = self._snapshot
        for observer in list(self._observers):
            try:
                observer.on_update(snapshot)
            except Exception:
                logger.exception("Job observer %r failed", observer)

    def _finish(self, state: JobState, **changes: Any) -> JobResult:
        self._publish(state=state, finished_at=datetime.now(timezone.utc), **changes)
        logger.info(
            "Job %s finished: %s",
            self._snapshot.job_id,
            state.value,
            extra={"job_state": state.value},
        )
        return JobResult(self._snapshot)

    def _finish_cancelled(self, exit_code: int | None = None) -> JobResult:
        return self._finish(
            JobState.CANCELLED,
            progress=0.0,
            status=STATUS_CANCELLED,
            exit_code=exit_code,
        )

    def _finish_failed(
        self, error: ConversionError, exit_code: int | None = None
    ) -> JobResult:
        logger.error(
            "Conversion failed: %s", error, extra={"error_kind": error.kind.value}
        )
        return self._finish(
            JobState.FAILED,
            status=str(error),
            error=error,
            exit_code=exit_code,
        )

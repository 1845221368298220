"""FFprobe-based implementation of the CodecProber protocol."""

from __future__ import annotations

import asyncio
import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from vconv.core.subprocess_utils import run_command
from vconv.introspector.interface import ProbeResult
from vconv.introspector.parsers import parse_stream_listing, select_primary_codecs
from vconv.jobs.exceptions import ProbeFailedError
from vconv.tools.detection import ToolLocator

logger = logging.getLogger(__name__)

# Prevent hangs on corrupted files
PROBE_TIMEOUT = 60


class FFprobeProber:
    """ffprobe-based implementation of CodecProber.

    Runs a single ffprobe call that lists every stream's type and codec,
    then reports the first video and first audio codec.
    """

    def __init__(
        self,
        ffprobe_path: Path | None = None,
        locator: ToolLocator | None = None,
    ) -> None:
        """Initialize the prober.

        Args:
            ffprobe_path: Explicit path to ffprobe. Takes precedence over
                the locator.
            locator: Locator used to find ffprobe lazily on first probe.
        """
        self._ffprobe_path = ffprobe_path
        self._locator = locator or ToolLocator()

    @property
    def ffprobe_path(self) -> Path:
        """Resolved ffprobe executable.

        Raises:
            ToolNotFoundError: If ffprobe cannot be located.
        """
        if self._ffprobe_path is None:
            self._ffprobe_path = self._locator.require("ffprobe")
        return self._ffprobe_path

    def build_args(self, path: Path) -> list[str]:
        return [
            str(self.ffprobe_path),
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_entries",
            "stream=index,codec_type,codec_name",
            str(path),
        ]

    def probe(self, path: Path) -> ProbeResult:
        """Inspect a media file.

        Args:
            path: Path to the media file.

        Returns:
            ProbeResult with the first video and audio codecs.

        Raises:
            ProbeFailedError: If the file is missing, ffprobe fails, or its
                output cannot be decoded or contains no video stream.
            ToolNotFoundError: If ffprobe is not available.
        """
        if not path.exists():
            raise ProbeFailedError(f"file not found: {path}")

        args = self.build_args(path)
        try:
            stdout, stderr, rc = run_command(args, timeout=PROBE_TIMEOUT, text=False)
        except subprocess.TimeoutExpired as e:
            raise ProbeFailedError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except OSError as e:
            raise ProbeFailedError(f"could not run ffprobe: {e}") from e

        return self._interpret(path, bytes(stdout), bytes(stderr), rc)

    async def probe_async(self, path: Path) -> ProbeResult:
        """Inspect a media file without blocking the event loop.

        Same results and errors as probe(). If the awaiting task is
        cancelled, ffprobe is killed before CancelledError propagates.
        """
        if not path.exists():
            raise ProbeFailedError(f"file not found: {path}")

        args = self.build_args(path)
        try:
            process = await asyncio.create_subprocess_exec(  # nosec B603
                *args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ProbeFailedError(f"could not run ffprobe: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=PROBE_TIMEOUT
            )
        except TimeoutError as e:
            await _kill(process)
            raise ProbeFailedError(
                f"ffprobe timed out for {path} after {PROBE_TIMEOUT}s"
            ) from e
        except asyncio.CancelledError:
            await _kill(process)
            raise

        return self._interpret(path, stdout, stderr, process.returncode or 0)

    def _interpret(
        self, path: Path, stdout: bytes, stderr: bytes, rc: int
    ) -> ProbeResult:
        if rc != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise ProbeFailedError(
                f"ffprobe exited with code {rc}" + (f": {message}" if message else "")
            )

        try:
            text = stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProbeFailedError(f"ffprobe output is not valid UTF-8: {e}") from e

        result = select_primary_codecs(parse_stream_listing(text))
        logger.info(
            "Probed %s: video=%s audio=%s",
            path.name,
            result.video_codec,
            result.audio_codec or "none",
            extra={
                "video_codec": result.video_codec,
                "audio_codec": result.audio_codec,
            },
        )
        return result


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()

"""Shared test fixtures for vconv."""

import json
import logging
import shutil
import stat
import sys
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from vconv.config.loader import clear_config_cache
from vconv.logging.context import clear_job_context

FAKE_FFMPEG_TEMPLATE = """\
import json
import sys
import time

args = sys.argv[1:]
if args == ["-version"]:
    print("ffmpeg version {version} Copyright (c) 2000-2023 the FFmpeg developers")
    sys.exit(0)

with open({args_file!r}, "w") as f:
    json.dump(args, f)

out = args[-1]
sys.stderr.write("Input #0, mov,mp4,m4a, from 'input':\\n")
sys.stderr.write("  Duration: {duration}, start: 0.000000, bitrate: 1000 kb/s\\n")
sys.stderr.flush()
with open(out, "wb") as f:
    f.write(b"converted media")
for t in {times!r}:
    sys.stderr.write(f"frame=  10 fps=25 time=00:00:{{t:05.2f}} speed=1x\\r")
    sys.stderr.flush()
if {exit_code} != 0:
    sys.stderr.write("\\n{error_line}\\n")
    sys.stderr.flush()
time.sleep({sleep})
sys.exit({exit_code})
"""

FAKE_FFPROBE_TEMPLATE = """\
import os
import sys
import time

args = sys.argv[1:]
if args == ["-version"]:
    print("ffprobe version {version} Copyright (c) 2007-2023 the FFmpeg developers")
    sys.exit(0)

with open({pid_file!r}, "w") as f:
    f.write(str(os.getpid()))
time.sleep({sleep})
sys.stdout.buffer.write({stdout!r})
sys.stderr.write({stderr!r})
sys.exit({exit_code})
"""


def _write_script(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def source_video(temp_dir: Path) -> Path:
    """Create a placeholder source file. Its content is never parsed."""
    path = temp_dir / "movie.mov"
    path.write_bytes(b"not really a movie")
    return path


@pytest.fixture
def bin_dir(temp_dir: Path) -> Path:
    """Directory holding generated fake tool executables."""
    path = temp_dir / "bin"
    path.mkdir()
    return path


@pytest.fixture
def make_fake_ffmpeg(bin_dir: Path) -> Callable[..., Path]:
    """Factory for a fake ffmpeg executable.

    The fake prints a Duration line and one ``time=`` stats update per entry
    in ``times`` (seconds), writes its last argument as the output file and
    exits with ``exit_code`` after sleeping ``sleep`` seconds. Its arguments
    are recorded as JSON in ``<bin_dir>/ffmpeg-args.json``.
    """

    def _make(
        times: Sequence[float] = (2.5, 5.0, 7.5, 10.0),
        exit_code: int = 0,
        sleep: float = 0,
        duration: str = "00:00:10.00",
        version: str = "6.1.1",
        error_line: str = "Error while encoding: something broke",
    ) -> Path:
        body = FAKE_FFMPEG_TEMPLATE.format(
            version=version,
            args_file=str(bin_dir / "ffmpeg-args.json"),
            duration=duration,
            times=list(times),
            exit_code=exit_code,
            sleep=sleep,
            error_line=error_line,
        )
        return _write_script(bin_dir / "ffmpeg", body)

    return _make


@pytest.fixture
def make_fake_ffprobe(bin_dir: Path) -> Callable[..., Path]:
    """Factory for a fake ffprobe executable.

    By default it reports an h264 video stream and an aac audio stream.
    ``stdout`` replaces the JSON listing with raw bytes. It sleeps ``sleep``
    seconds before answering and records its pid in ``<bin_dir>/ffprobe.pid``.
    """

    def _make(
        streams: list[dict] | None = None,
        stdout: bytes | None = None,
        stderr: str = "",
        exit_code: int = 0,
        version: str = "6.1.1",
        sleep: float = 0,
    ) -> Path:
        if streams is None:
            streams = [
                {"index": 0, "codec_name": "h264", "codec_type": "video"},
                {"index": 1, "codec_name": "aac", "codec_type": "audio"},
            ]
        if stdout is None:
            stdout = json.dumps({"streams": streams}).encode("utf-8")
        body = FAKE_FFPROBE_TEMPLATE.format(
            version=version,
            stdout=stdout,
            stderr=stderr,
            exit_code=exit_code,
            sleep=sleep,
            pid_file=str(bin_dir / "ffprobe.pid"),
        )
        return _write_script(bin_dir / "ffprobe", body)

    return _make


@pytest.fixture
def recorded_ffmpeg_args(bin_dir: Path) -> Callable[[], list[str]]:
    """Return a reader for the arguments the fake ffmpeg last received."""

    def _read() -> list[str]:
        return json.loads((bin_dir / "ffmpeg-args.json").read_text())

    return _read


@pytest.fixture(autouse=True)
def reset_global_state():
    """Restore root logger, config cache and job context between tests."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    clear_config_cache()
    yield
    root.handlers[:] = original_handlers
    root.setLevel(original_level)
    clear_config_cache()
    clear_job_context()

"""Tests for core subprocess utilities."""

import subprocess
import sys

import pytest

from vconv.core.subprocess_utils import run_command


class TestRunCommand:
    """Tests for run_command function."""

    def test_successful_command(self):
        """run_command returns stdout, stderr, returncode for successful command."""
        stdout, stderr, returncode = run_command(
            [sys.executable, "-c", "print('hello')"]
        )

        assert stdout.strip() == "hello"
        assert returncode == 0

    def test_command_failure_returns_non_zero(self):
        """run_command returns the exit status instead of raising."""
        stdout, stderr, returncode = run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"]
        )

        assert returncode == 3
        assert stderr == "bad"

    def test_bytes_mode_returns_raw_output(self):
        """text=False returns undecoded bytes."""
        stdout, _, _ = run_command(
            [sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'\\xff')"],
            text=False,
        )

        assert stdout == b"\xff"

    def test_timeout_raises_exception(self):
        """run_command raises TimeoutExpired for long-running commands."""
        with pytest.raises(subprocess.TimeoutExpired):
            run_command(
                [sys.executable, "-c", "import time; time.sleep(10)"], timeout=1
            )

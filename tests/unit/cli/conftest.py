"""Fixtures for CLI command tests."""

from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def cli_env(temp_dir: Path, bin_dir: Path) -> dict[str, str | None]:
    """Environment isolating the CLI from the user's config and tools.

    Tools are only found in bin_dir, which tests fill with fakes.
    """
    empty = temp_dir / "empty"
    empty.mkdir()
    return {
        "VCONV_CONFIG_PATH": str(temp_dir / "no-config.toml"),
        "VCONV_TOOL_DIRS": str(bin_dir),
        "PATH": str(empty),
        "VCONV_FFMPEG_PATH": None,
        "VCONV_FFPROBE_PATH": None,
        "VCONV_LOG_LEVEL": None,
        "VCONV_LOG_FORMAT": None,
        "VCONV_LOG_FILE": None,
    }


@pytest.fixture
def log_file(temp_dir: Path) -> Path:
    """Log file keeping log records out of command output."""
    return temp_dir / "vconv.log"

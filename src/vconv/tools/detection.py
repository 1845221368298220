"""External tool location and version detection.

ffmpeg and ffprobe are looked up in this order:

1. An explicitly configured path (config file, environment or CLI).
2. Well-known install directories (Homebrew on Apple Silicon and Intel,
   then the system bin directory).
3. The process ``PATH``.

The search directories are injectable so tests and unusual installs can
point the locator somewhere else.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess  # nosec B404 - subprocess is required for tool detection
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from vconv.core.subprocess_utils import run_command
from vconv.jobs.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DIRS: tuple[Path, ...] = (
    Path("/opt/homebrew/bin"),
    Path("/usr/local/bin"),
    Path("/usr/bin"),
)

# Timeout for version detection commands (seconds)
DETECTION_TIMEOUT = 10

_VERSION_PATTERN = re.compile(r"^\S+ version (\S+)", re.MULTILINE)


class ToolStatus(Enum):
    """Availability of an external tool."""

    AVAILABLE = "available"
    MISSING = "missing"
    ERROR = "error"


@dataclass(frozen=True)
class ToolInfo:
    """Result of detecting a single tool."""

    name: str
    status: ToolStatus
    path: Path | None = None
    version: str | None = None
    message: str | None = None

    @property
    def is_available(self) -> bool:
        return self.status is ToolStatus.AVAILABLE


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


class ToolLocator:
    """Resolves executable paths for ffmpeg and ffprobe.

    Example:
        locator = ToolLocator(configured={"ffmpeg": Path("/opt/ffmpeg/bin/ffmpeg")})
        ffmpeg = locator.require("ffmpeg")
    """

    def __init__(
        self,
        configured: Mapping[str, Path | None] | None = None,
        search_dirs: Sequence[Path] = DEFAULT_SEARCH_DIRS,
        use_path: bool = True,
    ) -> None:
        """Initialize the locator.

        Args:
            configured: Explicit tool paths keyed by tool name.
            search_dirs: Directories checked before PATH, in order.
            use_path: Fall back to PATH lookup when nothing else matched.
        """
        self._configured = dict(configured or {})
        self._search_dirs = tuple(search_dirs)
        self._use_path = use_path

    @property
    def search_dirs(self) -> tuple[Path, ...]:
        return self._search_dirs

    def find(self, name: str) -> Path | None:
        """Find a tool executable.

        Args:
            name: Tool name (e.g., "ffmpeg").

        Returns:
            Path to the executable, or None if not found.
        """
        configured_path = self._configured.get(name)
        if configured_path is not None:
            configured_path = Path(configured_path).expanduser()
            if _is_executable(configured_path):
                return configured_path
            logger.warning(
                "Configured path for %s is not an executable file: %s",
                name,
                configured_path,
            )

        for directory in self._search_dirs:
            candidate = directory / name
            if _is_executable(candidate):
                return candidate

        if self._use_path:
            which_result = shutil.which(name)
            if which_result:
                return Path(which_result)

        return None

    def require(self, name: str) -> Path:
        """Find a tool executable or raise.

        Raises:
            ToolNotFoundError: If the tool cannot be located.
        """
        path = self.find(name)
        if path is None:
            searched = [p for p in (self._configured.get(name),) if p is not None]
            searched.extend(d / name for d in self._search_dirs)
            logger.error("%s not found", name, extra={"tool": name})
            raise ToolNotFoundError(name, searched)
        logger.debug("Using %s at %s", name, path, extra={"tool": name})
        return path


def parse_version_output(output: str) -> str | None:
    """Extract the version from ``<tool> -version`` output.

    Handles release versions ("6.1.1") and git builds
    ("N-112345-gabcdef"). Returns None if no version line is present.
    """
    match = _VERSION_PATTERN.search(output)
    return match.group(1) if match else None


def detect_tool(locator: ToolLocator, name: str) -> ToolInfo:
    """Locate a tool and query its version.

    Args:
        locator: Locator used to find the executable.
        name: Tool name.

    Returns:
        ToolInfo describing availability.
    """
    path = locator.find(name)
    if path is None:
        return ToolInfo(name=name, status=ToolStatus.MISSING, message="not found")

    try:
        stdout, stderr, rc = run_command([path, "-version"], timeout=DETECTION_TIMEOUT)
    except (OSError, subprocess.TimeoutExpired) as e:
        return ToolInfo(name=name, status=ToolStatus.ERROR, path=path, message=str(e))

    if rc != 0:
        return ToolInfo(
            name=name,
            status=ToolStatus.ERROR,
            path=path,
            message=f"-version exited with code {rc}: {str(stderr).strip()}",
        )

    return ToolInfo(
        name=name,
        status=ToolStatus.AVAILABLE,
        path=path,
        version=parse_version_output(str(stdout)),
    )


def detect_all_tools(locator: ToolLocator) -> dict[str, ToolInfo]:
    """Detect ffmpeg and ffprobe."""
    return {name: detect_tool(locator, name) for name in ("ffmpeg", "ffprobe")}

"""External tool location and ffmpeg output parsing."""

from vconv.tools.detection import (
    DEFAULT_SEARCH_DIRS,
    ToolInfo,
    ToolLocator,
    ToolStatus,
    detect_all_tools,
    detect_tool,
)
from vconv.tools.ffmpeg_progress import (
    ProgressState,
    ProgressUpdate,
    parse_progress,
    parse_timestamp,
)

__all__ = [
    "DEFAULT_SEARCH_DIRS",
    "ProgressState",
    "ProgressUpdate",
    "ToolInfo",
    "ToolLocator",
    "ToolStatus",
    "detect_all_tools",
    "detect_tool",
    "parse_progress",
    "parse_timestamp",
]

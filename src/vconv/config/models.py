"""Configuration data models.

This module defines dataclasses for vconv configuration options.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from vconv.core.codecs import SpeedPreset
from vconv.executor.transcode.types import DEFAULT_CRF, MAX_CRF, MIN_CRF
from vconv.tools.detection import DEFAULT_SEARCH_DIRS, ToolLocator


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    Explicit paths win; otherwise search_dirs are checked in order, then PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None

    search_dirs: list[Path] = field(default_factory=lambda: list(DEFAULT_SEARCH_DIRS))
    """Directories checked before PATH."""


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "warning"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must not be negative")


@dataclass
class ConversionDefaults:
    """Defaults applied to conversions when the CLI does not override them."""

    preset: SpeedPreset = SpeedPreset.MEDIUM
    crf: int = DEFAULT_CRF
    include_subtitles: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not MIN_CRF <= self.crf <= MAX_CRF:
            raise ValueError(
                f"crf must be between {MIN_CRF} and {MAX_CRF}, got {self.crf}"
            )


@dataclass
class VConvConfig:
    """Main configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    conversion: ConversionDefaults = field(default_factory=ConversionDefaults)

    def tool_locator(self) -> ToolLocator:
        """Build a ToolLocator from the tool configuration."""
        return ToolLocator(
            configured={"ffmpeg": self.tools.ffmpeg, "ffprobe": self.tools.ffprobe},
            search_dirs=self.tools.search_dirs,
        )

"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (VCONV_*)
3. Config file (~/.vconv/config.toml)
4. Default values

Environment variables:
- VCONV_CONFIG_PATH: Path to config file (overrides default location)
- VCONV_FFMPEG_PATH: Path to ffmpeg executable
- VCONV_FFPROBE_PATH: Path to ffprobe executable
- VCONV_TOOL_DIRS: Directories searched for tools before PATH (os.pathsep separated)
- VCONV_LOG_LEVEL: Log level (debug, info, warning, error)
- VCONV_LOG_FORMAT: Log format (text, json)
- VCONV_LOG_FILE: Log file path
"""

from __future__ import annotations

import logging
import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from vconv.config.env import EnvReader
from vconv.config.models import (
    ConversionDefaults,
    LoggingConfig,
    ToolPathsConfig,
    VConvConfig,
)
from vconv.core.codecs import SpeedPreset

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".vconv"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict[str, Any], float]] = {}
_config_cache_lock = threading.Lock()


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by VCONV_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("VCONV_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(
    path: Path | None = None, *, strict: bool = False
) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Results are cached and reloaded when the file's mtime changes.

    Args:
        path: Path to config file. If None, uses default location.
        strict: Raise ConfigError on parse failures instead of warning and
            returning an empty dict.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist.

    Raises:
        ConfigError: When strict=True and the file cannot be read or parsed.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return cached[0]

        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            if strict:
                raise ConfigError(
                    f"Failed to load config file {path}: {e}", path
                ) from e
            logger.warning("Failed to load config file %s: %s", path, e)
            return {}

        logger.debug("Loaded config from %s", path)
        _config_cache[path] = (data, current_mtime)
        return data


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def _optional_path(value: Any) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value)).expanduser()


def _build_tools(
    section: dict[str, Any],
    reader: EnvReader,
    ffmpeg_path: Path | None,
    ffprobe_path: Path | None,
) -> ToolPathsConfig:
    tools = ToolPathsConfig()

    if "search_dirs" in section:
        tools.search_dirs = [Path(str(d)).expanduser() for d in section["search_dirs"]]
    env_dirs = reader.get_path_list("VCONV_TOOL_DIRS")
    if env_dirs:
        tools.search_dirs = env_dirs

    tools.ffmpeg = (
        ffmpeg_path
        or reader.get_path("VCONV_FFMPEG_PATH")
        or _optional_path(section.get("ffmpeg"))
    )
    tools.ffprobe = (
        ffprobe_path
        or reader.get_path("VCONV_FFPROBE_PATH")
        or _optional_path(section.get("ffprobe"))
    )
    return tools


def _build_logging(section: dict[str, Any], reader: EnvReader) -> LoggingConfig:
    defaults = LoggingConfig()
    return LoggingConfig(
        level=reader.get_str("VCONV_LOG_LEVEL") or section.get("level", defaults.level),
        file=reader.get_path("VCONV_LOG_FILE", must_exist=False)
        or _optional_path(section.get("file")),
        format=reader.get_str("VCONV_LOG_FORMAT")
        or section.get("format", defaults.format),
        include_stderr=bool(section.get("include_stderr", defaults.include_stderr)),
        max_bytes=int(section.get("max_bytes", defaults.max_bytes)),
        backup_count=int(section.get("backup_count", defaults.backup_count)),
    )


def _build_conversion(section: dict[str, Any]) -> ConversionDefaults:
    defaults = ConversionDefaults()
    preset = defaults.preset
    if "preset" in section:
        preset = SpeedPreset(str(section["preset"]).lower())
    return ConversionDefaults(
        preset=preset,
        crf=int(section.get("crf", defaults.crf)),
        include_subtitles=bool(
            section.get("include_subtitles", defaults.include_subtitles)
        ),
    )


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> VConvConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides VCONV_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: Raise ConfigError on unreadable files instead of falling
            back to defaults.

    Returns:
        VConvConfig with merged configuration.

    Raises:
        ConfigError: If a value is invalid, or the file cannot be parsed
            when strict=True.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(config_path, strict=strict)

    try:
        return VConvConfig(
            tools=_build_tools(
                file_config.get("tools", {}), reader, ffmpeg_path, ffprobe_path
            ),
            logging=_build_logging(file_config.get("logging", {}), reader),
            conversion=_build_conversion(file_config.get("conversion", {})),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}", config_path) from e

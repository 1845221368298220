"""Configuration for vconv.

Settings come from CLI arguments, VCONV_* environment variables,
~/.vconv/config.toml and built-in defaults, in that order of precedence.
"""

from vconv.config.env import EnvReader
from vconv.config.loader import (
    ConfigError,
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from vconv.config.models import (
    ConversionDefaults,
    LoggingConfig,
    ToolPathsConfig,
    VConvConfig,
)

__all__ = [
    "ConfigError",
    "ConversionDefaults",
    "EnvReader",
    "LoggingConfig",
    "ToolPathsConfig",
    "VConvConfig",
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "load_config_file",
]

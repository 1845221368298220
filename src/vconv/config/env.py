"""VCONV_* environment variable access.

EnvReader wraps a mapping (os.environ by default) so the loader can be
tested with an injected environment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class EnvReader:
    """Reads string and path settings from the environment.

    Example:
        reader = EnvReader(env={"VCONV_FFMPEG_PATH": "/opt/ffmpeg/bin/ffmpeg"})
        reader.get_path("VCONV_FFMPEG_PATH")
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Return the variable's value; unset and empty both yield default."""
        return self._env.get(var) or default

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Return the variable as a tilde-expanded Path.

        Args:
            var: Environment variable name.
            must_exist: Reject paths that do not exist, with a warning.
                Disabled for files vconv creates itself, such as logs.
            default: Returned when the variable is unset or rejected.
        """
        raw = self._env.get(var)
        if not raw:
            return default

        path = Path(raw).expanduser()
        if must_exist and not path.exists():
            logger.warning("Ignoring %s: non-existent path %s", var, raw)
            return default
        return path

    def get_path_list(
        self, var: str, separator: str = os.pathsep, default: list[Path] | None = None
    ) -> list[Path]:
        """Split a separator-delimited variable into paths.

        Empty entries are dropped. An unset variable yields a copy of
        default.
        """
        raw = self._env.get(var)
        if raw is None:
            return list(default or [])
        parts = (part.strip() for part in raw.split(separator))
        return [Path(part).expanduser() for part in parts if part]

"""Subprocess wrapper for short-lived external tool calls.

Used for blocking invocations such as ffprobe and ``-version`` checks.
Long-running ffmpeg conversions are driven asynchronously by the job
orchestrator instead.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def run_command(
    args: list[str | Path],
    timeout: int = 60,
    text: bool = True,
    **kwargs: Any,
) -> tuple[str | bytes, str | bytes, int]:
    """Run an external command and capture its output.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        timeout: Timeout in seconds (default 60).
        text: Decode output as UTF-8 with replacement. When False, raw
            bytes are returned so the caller can decode strictly.
        **kwargs: Additional subprocess.run arguments.

    Returns:
        Tuple of (stdout, stderr, returncode).

    Raises:
        subprocess.TimeoutExpired: If the command times out. The child is
            killed by subprocess.run before this is raised.
        OSError: If the executable cannot be started.
    """
    str_args = [str(arg) for arg in args]
    command_name = Path(str_args[0]).name if str_args else "unknown"

    logger.debug(
        "Executing command: %s",
        " ".join(str_args),
        extra={"command": command_name, "arg_count": len(str_args)},
    )

    if text:
        kwargs.setdefault("encoding", "utf-8")
        kwargs.setdefault("errors", "replace")

    start_time = time.monotonic()
    try:
        result = subprocess.run(  # nosec B603 - executable resolved by ToolLocator
            str_args,
            capture_output=True,
            timeout=timeout,
            check=False,
            **kwargs,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "Command timed out after %ds: %s",
            timeout,
            command_name,
            extra={"command": command_name, "timeout_seconds": timeout},
        )
        raise

    elapsed = time.monotonic() - start_time
    logger.debug(
        "Command completed",
        extra={
            "command": command_name,
            "elapsed_seconds": round(elapsed, 3),
            "returncode": result.returncode,
        },
    )

    empty: str | bytes = "" if text else b""
    return result.stdout or empty, result.stderr or empty, result.returncode

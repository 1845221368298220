"""JSON log formatting for vconv."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries, plus the ones set during formatting.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

# Set by JobContextFilter; job_tag only matters for text output.
_JOB_ATTRS = ("job_id", "input_path")


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line.

    Top-level keys are ``timestamp`` (ISO-8601 UTC), ``level``, ``message``
    and ``logger``. Fields passed through ``extra=`` and the current job's
    id and input path go under ``context``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.name and record.name != "root":
            entry["logger"] = record.name

        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
            and key not in _JOB_ATTRS
            and key != "job_tag"
            and not key.startswith("_")
        }
        # Applied last so extra={...} cannot shadow the job fields
        context.update(
            (key, getattr(record, key))
            for key in _JOB_ATTRS
            if getattr(record, key, None)
        )
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)

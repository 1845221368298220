"""Stub prober for tests and dry runs."""

from __future__ import annotations

from pathlib import Path

from vconv.introspector.interface import ProbeResult
from vconv.jobs.exceptions import ConversionError


class StubProber:
    """CodecProber returning a fixed result or raising a fixed error.

    Records every probed path in ``calls``.
    """

    def __init__(
        self,
        result: ProbeResult | None = None,
        error: ConversionError | None = None,
    ) -> None:
        self.result = result or ProbeResult(video_codec="h264", audio_codec="aac")
        self.error = error
        self.calls: list[Path] = []

    def probe(self, path: Path) -> ProbeResult:
        self.calls.append(path)
        if self.error is not None:
            raise self.error
        return self.result

    async def probe_async(self, path: Path) -> ProbeResult:
        return self.probe(path)

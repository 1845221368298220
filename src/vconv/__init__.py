"""vconv - Video Conversion Orchestrator.

Converts video files between containers with ffmpeg, copying streams the
destination already supports and re-encoding only what it does not.
"""

__version__ = "0.1.0"

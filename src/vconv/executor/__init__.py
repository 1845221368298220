"""Conversion planning and ffmpeg command construction."""

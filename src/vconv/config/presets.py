"""Settings preset loading and validation.

A preset is a YAML mapping of conversion settings, validated with Pydantic
and converted to ConversionSettings. Example::

    target: webm
    video_codec: vp9
    audio_codec: opus
    crf: 26
    include_subtitles: false
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vconv.core.codecs import (
    AudioCodecChoice,
    ContainerFormat,
    SpeedPreset,
    VideoCodecChoice,
)
from vconv.executor.transcode.types import (
    DEFAULT_CRF,
    MAX_CRF,
    MIN_CRF,
    ConversionSettings,
)


class PresetValidationError(Exception):
    """Error during preset validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class SettingsPresetModel(BaseModel):
    """Pydantic model for a settings preset file."""

    model_config = ConfigDict(extra="forbid")

    target: Literal["mp4", "mov", "mkv", "webm", "avi"] | None = None
    overwrite_original: bool = False
    output_directory: str | None = None
    include_video: bool = True
    include_audio: bool = True
    include_subtitles: bool = True
    video_codec: Literal["auto", "h264", "hevc", "vp9", "vp8"] = "auto"
    audio_codec: Literal["auto", "aac", "mp3", "opus", "vorbis"] = "auto"
    preset: Literal["ultrafast", "veryfast", "fast", "medium", "slow", "veryslow"] = (
        "medium"
    )
    crf: int = Field(default=DEFAULT_CRF, ge=MIN_CRF, le=MAX_CRF)
    bitrate_kbps: int | None = Field(default=None, gt=0)
    two_pass: bool = False

    @field_validator("target", "video_codec", "audio_codec", "preset", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def target_format(self) -> ContainerFormat | None:
        return ContainerFormat(self.target) if self.target else None

    def to_settings(self) -> ConversionSettings:
        return ConversionSettings(
            overwrite_original=self.overwrite_original,
            output_directory=(
                Path(self.output_directory).expanduser()
                if self.output_directory
                else None
            ),
            include_video=self.include_video,
            include_audio=self.include_audio,
            include_subtitles=self.include_subtitles,
            video_codec=VideoCodecChoice(self.video_codec),
            audio_codec=AudioCodecChoice(self.audio_codec),
            preset=SpeedPreset(self.preset),
            crf=self.crf,
            bitrate_kbps=self.bitrate_kbps,
            two_pass=self.two_pass,
        )


def _format_validation_error(error: ValidationError) -> tuple[str, str | None]:
    errors = error.errors()
    if not errors:
        return f"Preset validation failed: {error}", None
    first_error = errors[0]
    loc = ".".join(str(x) for x in first_error.get("loc", []))
    msg = first_error.get("msg", str(error))
    if loc:
        return f"Preset validation failed: {loc}: {msg}", loc
    return f"Preset validation failed: {msg}", None


def load_preset_from_dict(data: dict[str, Any]) -> SettingsPresetModel:
    """Validate preset data.

    Raises:
        PresetValidationError: If the data is invalid.
    """
    try:
        return SettingsPresetModel.model_validate(data)
    except ValidationError as e:
        message, field = _format_validation_error(e)
        raise PresetValidationError(message, field) from e


def load_preset(path: Path) -> SettingsPresetModel:
    """Load and validate a preset from a YAML file.

    Args:
        path: Path to the YAML preset file.

    Returns:
        Validated preset model.

    Raises:
        PresetValidationError: If the file is not valid YAML or fails validation.
        FileNotFoundError: If the file does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Preset file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PresetValidationError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise PresetValidationError("Preset file is empty")

    if not isinstance(data, dict):
        raise PresetValidationError("Preset file must be a YAML mapping")

    return load_preset_from_dict(data)

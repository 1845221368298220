"""Tests for configuration loading and precedence."""

from pathlib import Path

import pytest

from vconv.config.env import EnvReader
from vconv.config.loader import (
    ConfigError,
    get_config,
    get_default_config_path,
    load_config_file,
)
from vconv.core.codecs import SpeedPreset
from vconv.tools.detection import DEFAULT_SEARCH_DIRS


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadConfigFile:
    """Tests for load_config_file()."""

    def test_missing_file_returns_empty(self, tmp_path: Path) -> None:
        assert load_config_file(tmp_path / "missing.toml") == {}

    def test_parses_toml(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "config.toml", '[tools]\nffmpeg = "/opt/ffmpeg"\n')
        assert load_config_file(path) == {"tools": {"ffmpeg": "/opt/ffmpeg"}}

    def test_invalid_toml_lenient(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "config.toml", "[tools\n")
        assert load_config_file(path) == {}

    def test_invalid_toml_strict(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "config.toml", "[tools\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config_file(path, strict=True)

        assert exc_info.value.path == path

    def test_default_path_from_env(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("VCONV_CONFIG_PATH", str(tmp_path / "c.toml"))
        assert get_default_config_path() == tmp_path / "c.toml"


class TestGetConfig:
    """Tests for get_config() precedence."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = get_config(tmp_path / "missing.toml", env_reader=EnvReader(env={}))

        assert config.tools.ffmpeg is None
        assert config.tools.search_dirs == list(DEFAULT_SEARCH_DIRS)
        assert config.logging.level == "warning"
        assert config.conversion.crf == 23
        assert config.conversion.preset is SpeedPreset.MEDIUM

    def test_file_values(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "config.toml",
            "[tools]\n"
            'ffmpeg = "/opt/ff/ffmpeg"\n'
            'search_dirs = ["/opt/ff"]\n'
            "[logging]\n"
            'level = "debug"\n'
            'format = "json"\n'
            "[conversion]\n"
            'preset = "Slow"\n'
            "crf = 20\n"
            "include_subtitles = false\n",
        )

        config = get_config(path, env_reader=EnvReader(env={}))

        assert config.tools.ffmpeg == Path("/opt/ff/ffmpeg")
        assert config.tools.search_dirs == [Path("/opt/ff")]
        assert config.logging.level == "debug"
        assert config.logging.format == "json"
        assert config.conversion.preset is SpeedPreset.SLOW
        assert config.conversion.crf == 20
        assert config.conversion.include_subtitles is False

    def test_env_overrides_file(self, tmp_path: Path) -> None:
        ffmpeg = _write(tmp_path / "ffmpeg", "")
        path = _write(
            tmp_path / "config.toml",
            '[tools]\nffmpeg = "/opt/ff/ffmpeg"\n[logging]\nlevel = "debug"\n',
        )
        env = EnvReader(
            env={
                "VCONV_FFMPEG_PATH": str(ffmpeg),
                "VCONV_LOG_LEVEL": "error",
                "VCONV_TOOL_DIRS": f"{tmp_path}",
            }
        )

        config = get_config(path, env_reader=env)

        assert config.tools.ffmpeg == ffmpeg
        assert config.tools.search_dirs == [tmp_path]
        assert config.logging.level == "error"

    def test_cli_overrides_env(self, tmp_path: Path) -> None:
        env_ffprobe = _write(tmp_path / "ffprobe", "")
        env = EnvReader(env={"VCONV_FFPROBE_PATH": str(env_ffprobe)})

        config = get_config(
            tmp_path / "missing.toml",
            ffprobe_path=Path("/cli/ffprobe"),
            env_reader=env,
        )

        assert config.tools.ffprobe == Path("/cli/ffprobe")

    def test_env_path_must_exist(self, tmp_path: Path) -> None:
        env = EnvReader(env={"VCONV_FFMPEG_PATH": str(tmp_path / "nope")})

        config = get_config(tmp_path / "missing.toml", env_reader=env)

        assert config.tools.ffmpeg is None

    def test_invalid_values_raise_config_error(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "config.toml", "[conversion]\ncrf = 40\n")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            get_config(path, env_reader=EnvReader(env={}))

    def test_invalid_log_level_raises(self, tmp_path: Path) -> None:
        env = EnvReader(env={"VCONV_LOG_LEVEL": "loud"})

        with pytest.raises(ConfigError):
            get_config(tmp_path / "missing.toml", env_reader=env)

    def test_tool_locator_uses_config(self, tmp_path: Path) -> None:
        ffmpeg = _write(tmp_path / "ffmpeg", "#!/bin/sh\n")
        ffmpeg.chmod(0o755)
        config = get_config(
            tmp_path / "missing.toml", ffmpeg_path=ffmpeg, env_reader=EnvReader(env={})
        )

        locator = config.tool_locator()

        assert locator.find("ffmpeg") == ffmpeg
        assert config.tools.ffmpeg == ffmpeg

"""Tests for output path resolution and partial output cleanup."""

from pathlib import Path

from vconv.core.file_utils import (
    promote_working_file,
    remove_partial_output,
    resolve_output_path,
    working_path_for,
)


class TestResolveOutputPath:
    """Tests for resolve_output_path()."""

    def test_places_output_beside_input(self, temp_dir: Path) -> None:
        source = temp_dir / "clip.mov"
        assert resolve_output_path(source, "mp4") == temp_dir / "clip_converted.mp4"

    def test_adds_counter_when_taken(self, temp_dir: Path) -> None:
        source = temp_dir / "clip.mov"
        (temp_dir / "clip_converted.mp4").touch()
        (temp_dir / "clip_converted_1.mp4").touch()

        assert resolve_output_path(source, "mp4") == temp_dir / "clip_converted_2.mp4"

    def test_never_returns_existing_path(self, temp_dir: Path) -> None:
        source = temp_dir / "clip.mov"
        for _ in range(3):
            path = resolve_output_path(source, "mkv")
            assert not path.exists()
            path.touch()

    def test_uses_output_directory(self, temp_dir: Path) -> None:
        out_dir = temp_dir / "out"
        out_dir.mkdir()
        source = temp_dir / "clip.mov"

        result = resolve_output_path(source, "webm", output_directory=out_dir)

        assert result == out_dir / "clip_converted.webm"

    def test_overwrite_returns_input(self, temp_dir: Path) -> None:
        source = temp_dir / "clip.mov"
        source.touch()
        assert resolve_output_path(source, "mp4", overwrite_original=True) == source

    def test_same_extension_still_gets_suffix(self, temp_dir: Path) -> None:
        source = temp_dir / "clip.mp4"
        source.touch()
        assert resolve_output_path(source, "mp4") == temp_dir / "clip_converted.mp4"


class TestWorkingPath:
    """Tests for working_path_for() and promote_working_file()."""

    def test_distinct_output_is_written_directly(self, temp_dir: Path) -> None:
        source = temp_dir / "clip.mov"
        output = temp_dir / "clip_converted.mp4"
        assert working_path_for(output, source, "mp4") == output

    def test_overwrite_uses_hidden_sibling(self, temp_dir: Path) -> None:
        source = temp_dir / "clip.mov"
        working = working_path_for(source, source, "mp4")

        assert working.parent == temp_dir
        assert working.name.startswith(".clip")
        assert working.suffix == ".mp4"
        assert working != source

    def test_promote_replaces_target(self, temp_dir: Path) -> None:
        source = temp_dir / "clip.mov"
        source.write_bytes(b"old")
        working = working_path_for(source, source, "mp4")
        working.write_bytes(b"new")

        promote_working_file(working, source)

        assert source.read_bytes() == b"new"
        assert not working.exists()

    def test_promote_same_path_is_noop(self, temp_dir: Path) -> None:
        path = temp_dir / "clip.mp4"
        path.write_bytes(b"data")
        promote_working_file(path, path)
        assert path.read_bytes() == b"data"


class TestRemovePartialOutput:
    """Tests for remove_partial_output()."""

    def test_removes_existing_file(self, temp_dir: Path) -> None:
        path = temp_dir / "partial.mp4"
        path.write_bytes(b"half")

        assert remove_partial_output(path) is True
        assert not path.exists()

    def test_missing_file_returns_false(self, temp_dir: Path) -> None:
        assert remove_partial_output(temp_dir / "nothing.mp4") is False

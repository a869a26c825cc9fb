from __future__ import annotations

from pathlib import Path

import pytest

from nuscout.exceptions import FileOperationError
from nuscout.utils.filesystem import read_text_file, resolve_path


@pytest.mark.unit
class TestReadTextFile:
    def test_reads_content(self, tmp_path: Path) -> None:
        target = tmp_path / "project.assets.json"
        target.write_text('{"version": 3}', encoding="utf-8")

        assert read_text_file(target) == '{"version": 3}'

    def test_strips_byte_order_mark(self, tmp_path: Path) -> None:
        target = tmp_path / "project.assets.json"
        target.write_bytes(b'\xef\xbb\xbf{"version": 3}')

        assert read_text_file(target) == '{"version": 3}'

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="File not found") as exc_info:
            read_text_file(tmp_path / "missing.json")

        assert exc_info.value.operation == "read"

    def test_directory_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="Not a file"):
            read_text_file(tmp_path)

    def test_enforces_size_limit(self, tmp_path: Path) -> None:
        target = tmp_path / "big.json"
        target.write_text("x" * 100, encoding="utf-8")

        with pytest.raises(FileOperationError, match="File too large"):
            read_text_file(target, max_size=10)

        assert len(read_text_file(target, max_size=None)) == 100

    def test_decode_error_is_wrapped(self, tmp_path: Path) -> None:
        target = tmp_path / "binary.json"
        target.write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(FileOperationError, match="Failed to read") as exc_info:
            read_text_file(target)

        assert isinstance(exc_info.value.original_error, UnicodeDecodeError)


@pytest.mark.unit
class TestResolvePath:
    def test_resolves_relative_components(self, tmp_path: Path) -> None:
        assert resolve_path(tmp_path / "a" / ".." / "b") == (tmp_path / "b").resolve()

    def test_expands_user(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))

        assert resolve_path("~/packages") == (tmp_path / "packages").resolve()

    def test_accepts_path_inside_base(self, tmp_path: Path) -> None:
        inside = tmp_path / "packages" / "foo"

        assert resolve_path(inside, base_dir=tmp_path) == inside.resolve()
        assert resolve_path(tmp_path, base_dir=tmp_path) == tmp_path.resolve()

    def test_rejects_path_outside_base(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="outside allowed base") as exc_info:
            resolve_path(tmp_path.parent, base_dir=tmp_path)

        assert exc_info.value.operation == "resolve"

"""Tests for import/export file access."""

from pathlib import Path

import pytest

from scuba_log_server.interchange.errors import (
    ContentFormatError,
    FileAccessError,
    TextEncodingError,
)
from scuba_log_server.services.files import decode_text, read_import_file, write_export


class TestReadImportFile:
    def test_reads_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "dives.csv"
        path.write_bytes(b"Title\n")

        assert read_import_file(path) == b"Title\n"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileAccessError) as exc_info:
            read_import_file(tmp_path / "nope.csv")

        assert not isinstance(exc_info.value, ContentFormatError)
        assert exc_info.value.path.endswith("nope.csv")

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileAccessError):
            read_import_file(tmp_path)

    def test_size_limit(self, tmp_path: Path) -> None:
        path = tmp_path / "dives.csv"
        path.write_bytes(b"x" * 11)

        assert read_import_file(path, max_bytes=11) == b"x" * 11
        with pytest.raises(FileAccessError):
            read_import_file(path, max_bytes=10)


class TestDecodeText:
    def test_strips_byte_order_mark(self) -> None:
        assert decode_text(b"\xef\xbb\xbfTitle") == "Title"

    def test_utf8(self) -> None:
        assert decode_text("Air Temp (°C)".encode()) == "Air Temp (°C)"

    def test_invalid_utf8(self) -> None:
        with pytest.raises(TextEncodingError):
            decode_text(b"\xff\xfe\x00T")


class TestWriteExport:
    def test_creates_directory(self, tmp_path: Path) -> None:
        target = write_export(tmp_path / "a" / "b", "out.csv", b"Title\n")

        assert target == tmp_path / "a" / "b" / "out.csv"
        assert target.read_bytes() == b"Title\n"

    def test_unwritable_target(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(FileAccessError):
            write_export(blocker, "out.csv", b"")

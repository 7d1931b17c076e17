"""Tests for atomic writes, JSON/JSONL reading and config discovery."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from treepatch.core.errors import ConfigError, InvalidJsonError
from treepatch.storage.fs import (
    TREEPATCH_CONFIG_ENV,
    _fsync_directory,
    atomic_write,
    find_config,
    jsonl_read,
    read_json,
)


class TestAtomicWrite:
    """atomic_write() writes content safely via temp + fsync + rename."""

    def test_writes_expected_content(self, tmp_path: Path) -> None:
        target = tmp_path / "doc.json"
        atomic_write(target, '{"key": "value"}\n')

        assert target.read_text() == '{"key": "value"}\n'

    def test_writes_bytes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "doc.bin"
        data = b"\x00\x01\x02\x03"
        atomic_write(target, data)

        assert target.read_bytes() == data

    def test_no_temp_file_left_after_success(self, tmp_path: Path) -> None:
        target = tmp_path / "doc.json"
        atomic_write(target, "content\n")

        assert list(tmp_path.iterdir()) == [target]

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "doc.json"
        target.write_text("old content\n")

        atomic_write(target, "new content\n")
        assert target.read_text() == "new content\n"

    def test_parent_directory_must_exist(self, tmp_path: Path) -> None:
        target = tmp_path / "nonexistent" / "doc.json"

        with pytest.raises(FileNotFoundError, match="Parent directory does not exist"):
            atomic_write(target, "content\n")

    def test_handles_short_writes(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """os.write() can return fewer bytes than requested; atomic_write must loop."""
        target = tmp_path / "doc.bin"
        payload = b"ABCDEFGHIJ"

        real_write = os.write
        call_count = 0

        def short_write(fd: int, data: bytes | memoryview) -> int:
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                n = max(1, len(data) // 2)
                return real_write(fd, bytes(data[:n]))
            return real_write(fd, bytes(data))

        monkeypatch.setattr(os, "write", short_write)
        atomic_write(target, payload)

        assert target.read_bytes() == payload
        assert call_count >= 2

    def test_fsyncs_parent_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "doc.json"
        with patch("treepatch.storage.fs._fsync_directory") as mock_fsync:
            atomic_write(target, "content\n")
        mock_fsync.assert_called_once_with(tmp_path)

    def test_fsync_directory_ignores_oserror(self, tmp_path: Path) -> None:
        with patch("treepatch.storage.fs.os.open", side_effect=OSError("not supported")):
            _fsync_directory(tmp_path)


class TestReadJson:
    def test_reads_document(self, tmp_path: Path) -> None:
        path = tmp_path / "doc.json"
        path.write_text('{"a": [1, null]}')
        assert read_json(path) == {"a": [1, None]}

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "doc.json"
        path.write_text("{")
        with pytest.raises(InvalidJsonError, match="doc.json"):
            read_json(path)

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "doc.json"
        path.write_bytes(b'{"a": "\xff"}')
        with pytest.raises(InvalidJsonError, match="not UTF-8"):
            read_json(path)


class TestJsonlRead:
    def test_skips_blank_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "edits.jsonl"
        path.write_text('[["a"], "b", 1]\n\n   \n[]\n')
        assert jsonl_read(path) == [[["a"], "b", 1], []]

    def test_malformed_line_names_its_number(self, tmp_path: Path) -> None:
        path = tmp_path / "edits.jsonl"
        path.write_text('[]\n[oops\n')
        with pytest.raises(InvalidJsonError, match="edits.jsonl:2"):
            jsonl_read(path)

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "edits.jsonl"
        path.write_bytes(b'[[], "a", "\xfe"]\n')
        with pytest.raises(InvalidJsonError, match="edits.jsonl"):
            jsonl_read(path)


class TestFindConfig:
    def test_walks_up(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(TREEPATCH_CONFIG_ENV, raising=False)
        config = tmp_path / "treepatch.json"
        config.write_text("{}")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == config

    def test_none_when_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(TREEPATCH_CONFIG_ENV, raising=False)
        with patch.object(Path, "is_file", return_value=False):
            assert find_config(tmp_path) is None

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        elsewhere = tmp_path / "custom.json"
        elsewhere.write_text("{}")
        (tmp_path / "treepatch.json").write_text("{}")
        monkeypatch.setenv(TREEPATCH_CONFIG_ENV, str(elsewhere))
        assert find_config(tmp_path) == elsewhere

    def test_env_var_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(TREEPATCH_CONFIG_ENV, "")
        with pytest.raises(ConfigError, match="empty"):
            find_config()

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(TREEPATCH_CONFIG_ENV, str(tmp_path / "nope.json"))
        with pytest.raises(ConfigError, match="does not exist"):
            find_config()

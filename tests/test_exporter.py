"""
Tests for exporter — timestamps, file naming and all-or-nothing writes.
"""

import os
import stat
from datetime import datetime
from pathlib import Path

import pytest

import exporter
from exporter import build_export_path, export_printable, export_to_file, now_timestamp
from models import InventoryError
from receipt import Receipt


class _Unwritable:
    def get_file_content(self, timestamp=None):
        return "content"

    def print_to_file(self, filepath):
        return False


class TestTimestamp:
    def test_format(self):
        assert now_timestamp(datetime(2026, 10, 19, 8, 5, 3)) == "20261019_080503"

    def test_defaults_to_now(self):
        stamp = now_timestamp()
        assert len(stamp) == 15
        assert stamp[8] == "_"


class TestBuildExportPath:
    def test_name_convention(self, tmp_path):
        path = build_export_path("inventory", tmp_path, "20261019_080503")
        assert path == tmp_path / "inventory_20261019_080503.txt"

    def test_uses_fresh_timestamp(self, tmp_path):
        path = build_export_path("receipt", tmp_path)
        assert path.name.startswith("receipt_")
        assert path.suffix == ".txt"


class TestExportToFile:
    def test_writes_full_content(self, tmp_path):
        target = tmp_path / "out.txt"
        assert export_to_file("line one\nline two\n", target)
        assert target.read_text() == "line one\nline two\n"

    def test_accepts_string_path(self, tmp_path):
        target = os.path.join(str(tmp_path), "out.txt")
        assert export_to_file("x", target)
        assert Path(target).read_text() == "x"

    def test_missing_directory_fails_without_writing(self, tmp_path):
        target = tmp_path / "nope" / "out.txt"
        assert not export_to_file("content", target)
        assert not target.exists()

    def test_failed_replace_leaves_previous_file_and_no_temp(self, tmp_path, monkeypatch):
        target = tmp_path / "out.txt"
        target.write_text("previous")

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(exporter.os, "replace", boom)

        assert not export_to_file("new content", target)
        assert target.read_text() == "previous"
        assert os.listdir(tmp_path) == ["out.txt"]

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
    def test_written_file_follows_umask(self, tmp_path):
        target = tmp_path / "out.txt"
        previous = os.umask(0o022)
        try:
            assert export_to_file("content", target)
        finally:
            os.umask(previous)
        assert stat.S_IMODE(os.stat(target).st_mode) == 0o644

    def test_failure_is_logged(self, tmp_path, caplog):
        with caplog.at_level("ERROR", logger="exporter"):
            export_to_file("content", tmp_path / "nope" / "out.txt")
        assert "Failed to write" in caplog.text


class TestExportPrintable:
    def test_success_reports_path(self, tmp_path):
        receipt = Receipt()
        receipt.add_item("Milk", 1, 2.5)

        result = export_printable(receipt, "receipt", tmp_path, timestamp="20261019_080503")

        assert result
        assert result.path == str(tmp_path / "receipt_20261019_080503.txt")
        assert Path(result.path).read_text().startswith("===== RECEIPT =====\n")

    def test_failure_reports_file_write_failed(self, tmp_path):
        result = export_printable(_Unwritable(), "inventory", tmp_path)
        assert not result
        assert result.error is InventoryError.FILE_WRITE_FAILED

    @pytest.mark.parametrize("prefix", ["inventory", "receipt"])
    def test_unwritable_directory(self, tmp_path, prefix):
        result = export_printable(Receipt(), prefix, tmp_path / "missing")
        assert result.error is InventoryError.FILE_WRITE_FAILED

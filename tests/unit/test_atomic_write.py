"""Unit tests for atomic store file writes."""

import json
import time
from pathlib import Path

import pytest

from promptweave.services.exceptions import FileModifiedError, StoreError
from promptweave.services.file_monitor import FileMonitor
from promptweave.services.file_operations import atomic_write, read_json_file, write_json_file


class TestAtomicWrite:
    """Test atomic_write function with concurrent modification detection."""

    def test_atomic_write_creates_new_file(self, tmp_path):
        """Test that atomic_write creates a new file (and missing parent dirs)."""
        target = tmp_path / "nested" / "drafts.json"

        atomic_write(target, '{"drafts": []}')

        assert target.read_text() == '{"drafts": []}'

    def test_atomic_write_overwrites_existing_file(self, tmp_path):
        target = tmp_path / "prompts.json"
        target.write_text("old")

        atomic_write(target, "new")

        assert target.read_text() == "new"

    def test_atomic_write_with_file_monitor(self, tmp_path):
        """Test atomic_write refreshes the monitor after a successful write."""
        target = tmp_path / "prompts.json"
        target.write_text("{}")

        monitor = FileMonitor()
        monitor.record(target)

        atomic_write(target, '{"prompts": []}', monitor)

        assert not monitor.is_modified(target)

    def test_atomic_write_detects_early_modification(self, tmp_path):
        target = tmp_path / "prompts.json"
        target.write_text("{}")

        monitor = FileMonitor()
        monitor.record(target)

        # Small sleep to ensure mtime changes on filesystems with low precision
        time.sleep(0.01)
        target.write_text('{"prompts": ["external"]}')

        with pytest.raises(FileModifiedError, match="early check"):
            atomic_write(target, "{}", monitor)

        # The external change survives
        assert "external" in target.read_text()
        assert list(tmp_path.glob(".*.tmp.*")) == []

    def test_atomic_write_detects_late_modification(self, tmp_path, monkeypatch):
        """Test that a change made while the temp file is written is caught."""
        target = tmp_path / "drafts.json"
        target.write_text("{}")

        monitor = FileMonitor()
        monitor.record(target)

        original_write_text = Path.write_text

        def mock_write_text(self, *args, **kwargs):
            if self.name.startswith('.'):  # This is the temp file
                time.sleep(0.01)
                original_write_text(target, "changed during write")
            return original_write_text(self, *args, **kwargs)

        monkeypatch.setattr(Path, 'write_text', mock_write_text)

        with pytest.raises(FileModifiedError, match="late check"):
            atomic_write(target, "{}", monitor)

    def test_atomic_write_cleans_up_temp_file_on_error(self, tmp_path, monkeypatch):
        target = tmp_path / "drafts.json"

        def mock_write_text(self, *args, **kwargs):
            raise OSError("Simulated write error")

        monkeypatch.setattr(Path, 'write_text', mock_write_text)

        with pytest.raises(OSError, match="Simulated write error"):
            atomic_write(target, "{}")

        assert list(tmp_path.glob('.*.tmp.*')) == []

    def test_file_modified_error_is_store_error(self):
        error = FileModifiedError("/tmp/x.json")

        assert isinstance(error, StoreError)
        assert error.path == "/tmp/x.json"
        assert "/tmp/x.json" in str(error)


class TestJsonFiles:
    """Test JSON read/write helpers used by the stores."""

    def test_missing_file_reads_as_none(self, tmp_path):
        assert read_json_file(tmp_path / "missing.json") is None

    def test_corrupt_file_reads_as_none(self, tmp_path):
        target = tmp_path / "broken.json"
        target.write_text("{not json")

        assert read_json_file(target) is None

    def test_round_trip(self, tmp_path):
        target = tmp_path / "data.json"

        write_json_file(target, {"tags": ["日本語", "emoji 🤖"]})

        assert read_json_file(target) == {"tags": ["日本語", "emoji 🤖"]}
        assert json.loads(target.read_text(encoding="utf-8"))["tags"][0] == "日本語"

    def test_write_failure_wrapped_in_store_error(self, tmp_path, monkeypatch):
        def mock_write_text(self, *args, **kwargs):
            raise PermissionError("read-only")

        monkeypatch.setattr(Path, 'write_text', mock_write_text)

        with pytest.raises(StoreError, match="Failed to write store file"):
            write_json_file(tmp_path / "data.json", {})

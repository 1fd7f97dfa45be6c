"""Shared plumbing for JSON-file backed stores."""

from pathlib import Path
from typing import Any, Optional

from promptweave.services.file_monitor import FileMonitor
from promptweave.services.file_operations import read_json_file, write_json_file
from promptweave.utils.logging import get_logger


logger = get_logger(__name__)


class JsonFileStore:
    """
    Base class for stores that keep one JSON object in one file.

    Every operation re-reads the file so that several processes sharing a
    data directory see each other's changes; writes fail with
    FileModifiedError if the file changed since it was read.

    A file with the wrong shape (not an object, or a record list that is not
    a list) reads as empty, the same as a missing or corrupt file.
    """

    def __init__(self, path: Path, file_monitor: Optional[FileMonitor] = None) -> None:
        self.path = path
        self.file_monitor = file_monitor or FileMonitor()

    def _read(self) -> dict[str, Any]:
        data = read_json_file(self.path, self.file_monitor)
        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning("store_file_unreadable", path=str(self.path), error="Top level is not an object")
            return {}
        return data

    def _list_field(self, data: dict[str, Any], key: str) -> list[Any]:
        """Entries stored under ``key``, or [] if absent or not a list."""
        value = data.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("store_file_unreadable", path=str(self.path), error=f"'{key}' is not a list")
            return []
        return value

    def _write(self, data: dict[str, Any]) -> None:
        write_json_file(self.path, data, self.file_monitor)

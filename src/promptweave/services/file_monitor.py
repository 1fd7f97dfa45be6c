"""File modification monitoring for concurrent edit detection."""

from pathlib import Path
from typing import Dict


class FileMonitor:
    """
    Track file modification times to detect external changes.

    Stores record the mtime of their JSON file whenever they read it, so a
    write never silently overwrites changes made by another process (for
    example a second promptweave invocation).

    Example:
        >>> monitor = FileMonitor()
        >>> monitor.record(Path("drafts.json"))
        >>> # Later, before write:
        >>> if monitor.is_modified(Path("drafts.json")):
        ...     # Re-read and merge before writing
    """

    def __init__(self) -> None:
        """Initialize empty file tracker."""
        self._mtimes: Dict[Path, float] = {}

    def record(self, path: Path) -> None:
        """
        Record current modification time for a file.

        Missing files are tracked as "absent" so that their later creation
        by someone else counts as a modification.

        Args:
            path: File path to track
        """
        self._mtimes[path] = path.stat().st_mtime if path.exists() else -1.0

    def is_modified(self, path: Path) -> bool:
        """
        Check if file has been modified since last record.

        Args:
            path: File path to check

        Returns:
            True if file modified or not yet tracked, False otherwise
        """
        if path not in self._mtimes:
            return True
        current_mtime = path.stat().st_mtime if path.exists() else -1.0
        return current_mtime != self._mtimes[path]

    def refresh(self, path: Path) -> None:
        """
        Update recorded modification time after a successful write.

        Args:
            path: File path to refresh
        """
        self.record(path)

"""File operations for the JSON-backed stores.

Store files are written with a temp-file-rename pattern so a crash never
leaves a half-written prompt library or draft history behind.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import structlog

from promptweave.services.exceptions import FileModifiedError, StoreError
from promptweave.services.file_monitor import FileMonitor

logger = structlog.get_logger()


def atomic_write(
    path: Path,
    content: str,
    file_monitor: Optional[FileMonitor] = None
) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    This function implements safe file writing with:
    1. Early modification check (before write)
    2. Write to temporary file
    3. fsync to ensure data is on disk
    4. Late modification check (after write, before rename)
    5. Atomic rename to replace original file

    Args:
        path: Target file path
        content: Content to write
        file_monitor: Optional FileMonitor for concurrent modification detection

    Raises:
        FileModifiedError: If file was modified during write operation
        OSError: On file I/O errors
    """
    if file_monitor and file_monitor.is_modified(path):
        raise FileModifiedError(
            str(path),
            "File was modified before write (early check)"
        )

    path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory keeps the rename on one filesystem
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"

    try:
        temp_path.write_text(content, encoding='utf-8')

        with open(temp_path, 'r+', encoding='utf-8') as f:
            f.flush()
            os.fsync(f.fileno())

        if file_monitor and file_monitor.is_modified(path):
            raise FileModifiedError(
                str(path),
                "File was modified during write (late check)"
            )

        temp_path.replace(path)

        if file_monitor:
            file_monitor.refresh(path)

        logger.debug(
            "atomic_write_success",
            path=str(path),
            size=len(content)
        )

    except FileModifiedError:
        if temp_path.exists():
            temp_path.unlink()
        raise

    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error(
            "atomic_write_failed",
            path=str(path),
            error=str(e)
        )
        raise


def read_json_file(path: Path, file_monitor: Optional[FileMonitor] = None) -> Optional[Any]:
    """
    Read a JSON store file.

    Args:
        path: Store file path
        file_monitor: Optional FileMonitor to record the version read

    Returns:
        Decoded JSON data, or None if the file is missing or corrupt
    """
    if file_monitor:
        file_monitor.record(path)

    if not path.exists():
        return None

    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("store_file_unreadable", path=str(path), error=str(e))
        return None


def write_json_file(path: Path, data: Any, file_monitor: Optional[FileMonitor] = None) -> None:
    """
    Write a JSON store file atomically.

    Raises:
        StoreError: If the write fails (FileModifiedError on concurrent change)
    """
    try:
        atomic_write(path, json.dumps(data, indent=2, ensure_ascii=False), file_monitor)
    except StoreError:
        raise
    except OSError as e:
        raise StoreError(str(path), f"Failed to write store file ({e})") from e

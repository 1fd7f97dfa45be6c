"""Structured logging setup for promptweave."""

import logging
import os
from pathlib import Path
from typing import Any, Optional, TextIO

import structlog


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_log_stream: Optional[TextIO] = None


def default_log_file() -> Path:
    return Path.home() / ".cache" / "promptweave" / "logs" / "promptweave.log"


def resolve_log_level(level: Optional[str] = None) -> str:
    """
    Pick the effective log level.

    An explicit ``level`` wins over PROMPTWEAVE_LOG_LEVEL; anything that is
    not one of LOG_LEVELS falls back to INFO.
    """
    candidate = (level or os.environ.get("PROMPTWEAVE_LOG_LEVEL") or "INFO").upper()
    return candidate if candidate in LOG_LEVELS else "INFO"


def configure_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> Path:
    """
    Configure structlog for JSON lines appended to the promptweave log file.

    Every CLI invocation calls this once. Calling it again (another command in
    the same process, tests) closes the previous file and redirects all
    module-level loggers, which is why loggers are not cached on first use.

    Log levels:
    - DEBUG: Drag phases, rejected payloads, no-op engine calls
    - INFO: Draft saves/loads, prompt library changes, config loading
    - WARNING: Corrupt drafts or store files replaced by safe defaults
    - ERROR: Store write failures

    Args:
        level: Minimum level; defaults to PROMPTWEAVE_LOG_LEVEL, then INFO
        log_file: Target file; defaults to ~/.cache/promptweave/logs/promptweave.log

    Returns:
        Path of the log file in use

    Example:
        promptweave --log-level debug drafts list
        tail -f ~/.cache/promptweave/logs/promptweave.log | jq .
    """
    global _log_stream

    log_file = log_file or default_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    if _log_stream is not None and not _log_stream.closed:
        _log_stream.close()
    _log_stream = open(log_file, "a", encoding="utf-8")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, resolve_log_level(level))),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=_log_stream),
        cache_logger_on_first_use=False,
    )
    return log_file


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("draft_saved", draft_id="abc", blocks=3)
    """
    return structlog.get_logger(name)

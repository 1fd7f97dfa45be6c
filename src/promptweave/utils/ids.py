"""Identifier and timestamp helpers for promptweave records."""

import time
import uuid


def generate_random_uuid() -> str:
    """
    Generate random UUID v4.

    Used for new saved prompts and drafts.

    Returns:
        UUID string in standard format

    Example:
        >>> generate_random_uuid()
        "f47ac10b-58cc-4372-a567-0e02b2c3d479"
    """
    return str(uuid.uuid4())


def now_millis() -> int:
    """Current time as integer milliseconds since the Unix epoch."""
    return int(time.time() * 1000)

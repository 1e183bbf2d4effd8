import re
import time
from typing import Optional

UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9\-_]")
MAX_TITLE_LENGTH = 100


def sanitize_filename(name: str, max_length: int = MAX_TITLE_LENGTH) -> str:
    """Replace anything outside [A-Za-z0-9-_] with '_' and truncate"""
    return UNSAFE_CHARS_RE.sub("_", name)[:max_length]


def unique_filename(title: str, extension: str, timestamp_ms: Optional[int] = None) -> str:
    """Sanitized title + millisecond timestamp suffix + extension"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{sanitize_filename(title)}_{timestamp_ms}.{extension}"

"""
Formatting utilities for display and conversion.
"""
import re
from datetime import datetime, timezone
from typing import Optional

STORAGE_UNITS = ['B', 'KB', 'MB', 'GB']


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def format_storage(size_bytes: int) -> str:
    """
    Format a byte count for the statistics panels.

    Args:
        size_bytes: Size in bytes

    Returns:
        Size with at most two decimals and no trailing zeros (e.g. "1.5 KB", "2 MB")
    """
    if not size_bytes or size_bytes <= 0:
        return '0 B'
    exponent = 0
    while size_bytes >= 1024 ** (exponent + 1) and exponent < len(STORAGE_UNITS) - 1:
        exponent += 1
    value = round(size_bytes / (1024 ** exponent), 2)
    return f"{value:g} {STORAGE_UNITS[exponent]}"


def format_size_kb(size_bytes: Optional[int]) -> str:
    """Format a byte count as whole kilobytes, as shown in download logs."""
    return f"{round((size_bytes or 0) / 1024)} KB"


def safe_filename_part(value: Optional[str]) -> str:
    """Collapse anything outside [A-Za-z0-9_-] to '-'; missing values become 'all'."""
    if not value:
        return 'all'
    return re.sub(r'[^a-zA-Z0-9_-]+', '-', str(value))


def month_key(file_date: Optional[str]) -> Optional[str]:
    """Return the YYYY-MM bucket of a YYYY-MM-DD date string."""
    if not file_date:
        return None
    return str(file_date)[:7]

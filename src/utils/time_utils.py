"""Time utility functions for rendering log timestamps."""

from datetime import datetime, timezone
from typing import Optional, Union


def format_ms_timestamp(ts: Union[int, float, None]) -> Optional[str]:
    """
    Render a millisecond epoch timestamp as an ISO-8601 UTC string.
    
    Args:
        ts: Milliseconds since the Unix epoch (e.g., 1704067200000)
    
    Returns:
        ISO format string (e.g., "2024-01-01T00:00:00+00:00"), or None if the
        value is missing or out of range
    """
    if ts is None or isinstance(ts, bool):
        return None
    
    try:
        dt = datetime.fromtimestamp(ts / 1000, tz=timezone.utc)
        return dt.isoformat()
    except (ValueError, TypeError, OverflowError, OSError):
        return None

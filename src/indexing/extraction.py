"""Flattening of log records into full-text search entries."""

from typing import List, Sequence

from .models import LogRecord, SearchEntry


def extract_search_entries(records: Sequence[LogRecord]) -> List[SearchEntry]:
    """
    Create search entries from the (already corrected) records of one file.
    
    ``idx`` is the position in the given sequence, not in the original file,
    so records after a redaction shift down.
    
    Args:
        records: Corrected records of one log file, in order
        
    Returns:
        One search entry per record
    """
    return [
        SearchEntry(
            sender=record.sender_name,
            ts=record.ts,
            idx=idx,
            content=record.content.body,
        )
        for idx, record in enumerate(records)
    ]

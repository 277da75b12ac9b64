"""Resume bookmarks recording how far a room index got."""

import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from utils.file_io import load_json, save_json_atomic
from utils.time_utils import format_ms_timestamp
from .exceptions import IndexingError
from .models import LogRecord, ResumeBookmark

# Set up logging
logger = logging.getLogger(__name__)

BOOKMARK_SUFFIX = "-last-added.json"


def compute_bookmark(file_name: str, records: Sequence[LogRecord]) -> ResumeBookmark:
    """
    Build the bookmark for the last processed log file.
    
    Whether identifiers are usable is decided once per file, from its first
    record. Files with identifiers store all of them in order; files without
    store the timestamp of their last record.
    
    Args:
        file_name: Name of the last processed log file
        records: Records of that file as read from disk, before corrections
        
    Returns:
        ResumeBookmark with either ``ids`` or ``ts``
    """
    if not records:
        return ResumeBookmark(file=file_name, ids=[])
    if records[0].id is not None:
        return ResumeBookmark(file=file_name, ids=[record.id for record in records])
    # No unique ids in this file; fall back to the timestamp
    return ResumeBookmark(file=file_name, ts=records[-1].ts)


def bookmark_path_for(index_path: Path) -> Path:
    """Return the bookmark file path that belongs to an index file."""
    index_path = Path(index_path)
    return index_path.with_name(index_path.stem + BOOKMARK_SUFFIX)


def write_bookmark(bookmark_path: Path, bookmark: ResumeBookmark) -> None:
    """Persist a bookmark as compact JSON, omitting the unused position field."""
    data = {"file": bookmark.file}
    if bookmark.ids is not None:
        data["ids"] = bookmark.ids
    else:
        data["ts"] = bookmark.ts
    save_json_atomic(data, bookmark_path)

    if bookmark.ts is not None:
        logger.info(f"Bookmark: {bookmark.file} up to {format_ms_timestamp(bookmark.ts) or bookmark.ts}")
    else:
        logger.info(f"Bookmark: {bookmark.file} with {len(bookmark.ids or [])} ids")


def read_bookmark(bookmark_path: Path) -> Optional[ResumeBookmark]:
    """
    Load a previously written bookmark.
    
    Args:
        bookmark_path: Path to a ``*-last-added.json`` file
        
    Returns:
        The bookmark, or None if the file does not exist
    """
    bookmark_path = Path(bookmark_path)
    if not bookmark_path.exists():
        return None
    try:
        return ResumeBookmark.model_validate(load_json(bookmark_path))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise IndexingError(f"Invalid bookmark file {bookmark_path}: {e}") from e

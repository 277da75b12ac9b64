"""Main pipeline for building a room's full-text search index from its JSON logs."""

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from .bookmark import bookmark_path_for, compute_bookmark, write_bookmark
from .exceptions import IndexWriteError
from .extraction import extract_search_entries
from .fts import compact_index, create_search_table, insert_entries
from .models import BuildResult, BuildStatus, LogRecord
from .modifications import ContentModifier
from .parsing import list_log_files, load_log_file

# Set up logging
logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".partial"


def partial_path_for(index_path: Path) -> Path:
    """Return the path an index is built at before it is moved into place."""
    index_path = Path(index_path)
    return index_path.with_name(index_path.name + PARTIAL_SUFFIX)


def build_room_index(
    source_dir: Path,
    index_path: Path,
    modifier: Optional[ContentModifier] = None,
) -> BuildResult:
    """
    Build the search index for one room from its JSON log files.

    An existing index is never reopened: if ``index_path`` exists the build is
    skipped, and a room without log files produces nothing. Otherwise the
    index is written to a ``.partial`` file, compacted and closed, its
    bookmark is written, and only then is it renamed to ``index_path``. An
    index file on disk therefore always comes with its bookmark.

    Args:
        source_dir: Directory holding the room's ``*.json`` log files
        index_path: Final path of the SQLite index file
        modifier: Corrections to apply to each file's records (default: in-band
            edits only)

    Returns:
        BuildResult describing what happened
    """
    index_path = Path(index_path)
    bookmark_path = bookmark_path_for(index_path)

    if index_path.exists():
        logger.info(f"Index {index_path} exists; remove it to rebuild")
        return BuildResult(status=BuildStatus.SKIPPED_EXISTING, index_path=index_path)

    files = list_log_files(source_dir)
    if not files:
        logger.info(f"No log files in {source_dir}; nothing to index")
        return BuildResult(status=BuildStatus.SKIPPED_EMPTY, index_path=index_path)

    if modifier is None:
        modifier = ContentModifier()

    partial_path = partial_path_for(index_path)
    if partial_path.exists():
        logger.warning(f"Removing unfinished index from an earlier run: {partial_path}")
        partial_path.unlink()
    index_path.parent.mkdir(parents=True, exist_ok=True)

    final_name: Optional[str] = None
    final_records: List[LogRecord] = []
    entries_indexed = 0

    try:
        conn = sqlite3.connect(partial_path)
    except sqlite3.Error as e:
        raise IndexWriteError(f"Could not open index {partial_path}: {e}") from e

    try:
        create_search_table(conn)

        for file_name in files:
            logger.info(f"Reading {file_name}")
            records = load_log_file(Path(source_dir) / file_name)
            final_name = file_name
            final_records = records

            entries = extract_search_entries(modifier.apply(records))
            if not entries:
                continue
            insert_entries(conn, entries)
            entries_indexed += len(entries)

        compact_index(conn)
    finally:
        conn.close()

    logger.info("Noting last entry...")
    bookmark = compute_bookmark(final_name, final_records)
    write_bookmark(bookmark_path, bookmark)

    partial_path.replace(index_path)
    logger.info(f"Indexed {entries_indexed} entries from {len(files)} files into {index_path}")

    return BuildResult(
        status=BuildStatus.BUILT,
        index_path=index_path,
        bookmark_path=bookmark_path,
        files_processed=len(files),
        entries_indexed=entries_indexed,
        bookmark=bookmark,
    )

"""SQLite FTS5 storage for room search indexes."""

import logging
import sqlite3
from typing import Sequence

from .exceptions import IndexWriteError
from .models import SearchEntry

# Set up logging
logger = logging.getLogger(__name__)

SEARCH_TABLE = "search"
PREFIX_LENGTH = 3
COMPACT_PAGE_SIZE = 2048

_INSERT_STATEMENT = (
    f"INSERT INTO {SEARCH_TABLE} (sender, ts, idx, content) "
    "VALUES (:sender, :ts, :idx, :content)"
)


def create_search_table(conn: sqlite3.Connection) -> None:
    """Create the full-text table; ``ts`` and ``idx`` are stored but not indexed."""
    try:
        conn.execute(
            f"""
            CREATE VIRTUAL TABLE {SEARCH_TABLE} USING fts5(
                sender,
                ts UNINDEXED,
                idx UNINDEXED,
                content,
                prefix={PREFIX_LENGTH}
            );
            """
        )
    except sqlite3.Error as e:
        raise IndexWriteError(f"Could not create search table: {e}") from e


def insert_entries(conn: sqlite3.Connection, entries: Sequence[SearchEntry]) -> None:
    """
    Insert the entries of one log file in a single transaction.
    
    Args:
        conn: Open connection to the index being built
        entries: Entries of one file, in order
    """
    try:
        with conn:
            conn.executemany(_INSERT_STATEMENT, (entry.model_dump() for entry in entries))
    except sqlite3.Error as e:
        raise IndexWriteError(f"Could not insert {len(entries)} search entries: {e}") from e


def compact_index(conn: sqlite3.Connection) -> None:
    """
    Merge FTS segments, then vacuum and analyze the whole database.
    
    A smaller page size is set right before ``VACUUM`` so that the rebuilt
    file uses it.
    """
    try:
        logger.info("Optimizing full-text index...")
        with conn:
            conn.execute(f"INSERT INTO {SEARCH_TABLE} ({SEARCH_TABLE}) VALUES ('optimize')")

        logger.info("Compacting database...")
        conn.execute(f"PRAGMA page_size = {COMPACT_PAGE_SIZE}")
        conn.execute("VACUUM")
        conn.execute("ANALYZE")
        conn.commit()
    except sqlite3.Error as e:
        raise IndexWriteError(f"Could not compact search index: {e}") from e

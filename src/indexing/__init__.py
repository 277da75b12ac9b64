"""Indexing module for building full-text search indexes from chat log archives."""

from .bookmark import compute_bookmark, read_bookmark, write_bookmark
from .config import RoomConfig, Settings, load_rooms, load_settings, sanitize_room_name
from .driver import run_pipeline
from .extraction import extract_search_entries
from .models import BuildResult, BuildStatus, LogRecord, ResumeBookmark, SearchEntry
from .modifications import ContentModifier, load_modifications
from .parsing import list_log_files, load_log_file
from .pipeline import build_room_index

__all__ = [
    "BuildResult",
    "BuildStatus",
    "ContentModifier",
    "LogRecord",
    "ResumeBookmark",
    "RoomConfig",
    "SearchEntry",
    "Settings",
    "build_room_index",
    "compute_bookmark",
    "extract_search_entries",
    "list_log_files",
    "load_log_file",
    "load_modifications",
    "load_rooms",
    "load_settings",
    "read_bookmark",
    "run_pipeline",
    "sanitize_room_name",
    "write_bookmark",
]

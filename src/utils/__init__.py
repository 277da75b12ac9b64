"""General utility functions for file I/O and data operations."""

from .file_io import load_json, save_json_atomic
from .time_utils import format_ms_timestamp

__all__ = [
    "load_json",
    "save_json_atomic",
    "format_ms_timestamp",
]

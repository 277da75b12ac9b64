"""Loading utilities for per-room JSON chat log files."""

import json
import logging
from pathlib import Path
from typing import List

from pydantic import TypeAdapter, ValidationError

from utils.file_io import load_json
from .exceptions import LogFileError, LogSourceError
from .models import LogRecord

# Set up logging
logger = logging.getLogger(__name__)

LOG_FILE_EXTENSION = ".json"

_records_adapter = TypeAdapter(List[LogRecord])


def list_log_files(source_dir: Path) -> List[str]:
    """
    List the log files of a room, sorted by file name.

    Log files are named so that lexicographic order is chronological
    (e.g., ``2024-01-01.json``), so the sorted order is also the order in
    which records were appended.

    Args:
        source_dir: Directory holding the room's JSON log files

    Returns:
        Sorted list of file names ending in ``.json``
    """
    source_dir = Path(source_dir)
    try:
        names = [
            entry.name
            for entry in source_dir.iterdir()
            if entry.name.endswith(LOG_FILE_EXTENSION) and entry.is_file()
        ]
    except OSError as e:
        raise LogSourceError(f"Cannot list log directory {source_dir}: {e}") from e

    return sorted(names)


def load_log_file(file_path: Path) -> List[LogRecord]:
    """
    Load and validate one log file.

    Args:
        file_path: Path to a JSON file holding an array of log records

    Returns:
        Records in file order
    """
    try:
        data = load_json(file_path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise LogFileError(f"Cannot read log file {file_path}: {e}") from e

    if not isinstance(data, list):
        raise LogFileError(
            f"Log file {file_path} must contain a JSON array, got {type(data).__name__}"
        )

    try:
        records = _records_adapter.validate_python(data)
    except ValidationError as e:
        raise LogFileError(f"Invalid log record in {file_path}: {e}") from e

    logger.debug(f"Loaded {len(records)} records from {file_path}")
    return records

"""Pytest configuration and fixtures for indexing tests."""

import json
import shutil
import sqlite3
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Optional

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    # Cleanup
    if temp_path.exists():
        shutil.rmtree(temp_path)


@pytest.fixture(scope="function")
def room_dir(temp_dir: Path) -> Path:
    """Create an empty room log directory."""
    path = temp_dir / "logs" / "General"
    path.mkdir(parents=True)
    return path


@pytest.fixture(scope="function")
def write_log() -> Callable[[Path, str, List[Dict[str, Any]]], Path]:
    """Return a helper that writes a list of raw records as a JSON log file."""
    def _write(directory: Path, name: str, records: List[Dict[str, Any]]) -> Path:
        path = directory / name
        path.write_text(json.dumps(records), encoding="utf-8")
        return path
    return _write


@pytest.fixture(scope="function")
def read_index() -> Callable[[Path], List[tuple]]:
    """Return a helper that reads all rows of an index in insertion order."""
    def _read(index_path: Path) -> List[tuple]:
        conn = sqlite3.connect(index_path)
        try:
            return conn.execute(
                "SELECT sender, ts, idx, content FROM search ORDER BY rowid"
            ).fetchall()
        finally:
            conn.close()
    return _read


@pytest.fixture(scope="function")
def sample_records() -> List[Dict[str, Any]]:
    """Two messages with ids, as in a current room log."""
    return [
        {"id": "a", "senderName": "Alice", "ts": 100, "content": {"body": "hello"}},
        {"id": "b", "senderName": "Bob", "ts": 101, "content": {"body": "hi there"}},
    ]


@pytest.fixture(scope="function")
def make_record() -> Callable[..., Dict[str, Any]]:
    """Return a helper that builds one raw log record."""
    def _make(
        idx: int,
        body: Optional[str] = None,
        record_id: Optional[str] = None,
        sender: str = "Alice",
        **content: Any,
    ) -> Dict[str, Any]:
        record = {
            "senderName": sender,
            "ts": 1000 + idx,
            "content": {"body": body if body is not None else f"message {idx}", **content},
        }
        if record_id is not None:
            record["id"] = record_id
        return record
    return _make

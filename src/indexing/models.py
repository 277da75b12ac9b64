"""Pydantic models for chat log records, search entries and build results."""

from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


Timestamp = Union[int, float]


class MessageContent(BaseModel):
    """Payload of a logged message. Unknown keys are kept as extras."""

    body: Optional[str] = Field(default=None, description="Text payload to index")

    model_config = ConfigDict(extra="allow")


class LogRecord(BaseModel):
    """One message as stored in a room's JSON log file."""

    id: Optional[str] = Field(
        default=None,
        description="Stable unique identifier (missing in some older logs)",
    )
    sender_name: Optional[str] = Field(
        default=None,
        alias="senderName",
        description="Display name of the author at log time",
    )
    ts: Timestamp = Field(..., description="Message timestamp")
    content: MessageContent = Field(default_factory=MessageContent)

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SearchEntry(BaseModel):
    """A row of the full-text search table."""

    sender: Optional[str] = None
    ts: Timestamp
    idx: int = Field(..., ge=0, description="Position within the (modified) source file")
    content: Optional[str] = None


class ResumeBookmark(BaseModel):
    """Marker of the last source file added to a room index.

    Carries either the identifiers of every record in that file or, when the
    file has no identifiers, the timestamp of its last record. Never both.
    """

    file: str
    ids: Optional[List[Optional[str]]] = None
    ts: Optional[Timestamp] = None

    @model_validator(mode="after")
    def check_exclusive_position(self) -> "ResumeBookmark":
        """Require exactly one of ``ids`` and ``ts``."""
        if (self.ids is None) == (self.ts is None):
            raise ValueError("Bookmark must contain exactly one of 'ids' or 'ts'")
        return self


class BuildStatus(str, Enum):
    """Outcome of a single room index build."""

    BUILT = "built"
    SKIPPED_EXISTING = "skipped_existing"
    SKIPPED_EMPTY = "skipped_empty"


class BuildResult(BaseModel):
    """Summary of a room index build."""

    status: BuildStatus
    index_path: Path
    bookmark_path: Optional[Path] = None
    files_processed: int = 0
    entries_indexed: int = 0
    bookmark: Optional[ResumeBookmark] = None


class RoomOutcome(BaseModel):
    """Result of running the whole pipeline for one room."""

    room: str
    build: BuildResult
    split: bool = Field(default=False, description="Whether the split step ran")

"""Corrections applied to log records before they are indexed.

Two kinds of corrections are supported:

- In-band edits: a logged message that replaces an earlier one carries
  ``m.relates_to = {"rel_type": "m.replace", "event_id": <id>}`` in its
  content. The edited text replaces the target's body and the edit message
  itself is dropped. When the target was logged in an earlier file, the edit
  message stays and carries the edited text instead.
- Operator corrections: a list of ``redact``, ``edit`` and ``merge`` rules,
  usually loaded from a JSON file, applied in order.

Records are never mutated; changed records are copies.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from utils.file_io import load_json
from .exceptions import ConfigError
from .models import LogRecord, Timestamp

# Set up logging
logger = logging.getLogger(__name__)

REPLACE_RELATION = "m.replace"


class RecordSelector(BaseModel):
    """Picks records by identifier, timestamp and/or sender.

    Every given field must match. A selector without fields matches nothing.
    """

    id: Optional[str] = None
    ts: Optional[Timestamp] = None
    sender_name: Optional[str] = Field(default=None, alias="senderName")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def matches(self, record: LogRecord) -> bool:
        criteria = [
            (self.id, record.id),
            (self.ts, record.ts),
            (self.sender_name, record.sender_name),
        ]
        wanted = [(expected, actual) for expected, actual in criteria if expected is not None]
        return bool(wanted) and all(expected == actual for expected, actual in wanted)


class Redaction(BaseModel):
    """Remove matching records."""

    kind: Literal["redact"] = "redact"
    target: RecordSelector


class Edit(BaseModel):
    """Rewrite the body and/or sender of matching records."""

    kind: Literal["edit"] = "edit"
    target: RecordSelector
    body: Optional[str] = None
    sender_name: Optional[str] = Field(default=None, alias="senderName")

    model_config = ConfigDict(populate_by_name=True)


class Merge(BaseModel):
    """Fold matching records into the record right before them."""

    kind: Literal["merge"] = "merge"
    target: RecordSelector
    separator: str = "\n"


Modification = Annotated[Union[Redaction, Edit, Merge], Field(discriminator="kind")]

_modifications_adapter = TypeAdapter(List[Modification])


def _with_body(record: LogRecord, body: Optional[str]) -> LogRecord:
    content = record.content.model_copy(update={"body": body})
    return record.model_copy(update={"content": content})


def _replacement_target(record: LogRecord) -> Optional[str]:
    """Return the id an in-band edit replaces, or None for ordinary messages."""
    relation = (record.content.model_extra or {}).get("m.relates_to")
    if not isinstance(relation, dict) or relation.get("rel_type") != REPLACE_RELATION:
        return None
    target = relation.get("event_id")
    return target if isinstance(target, str) else None


def _replacement_body(edit: LogRecord) -> Optional[str]:
    new_content = (edit.content.model_extra or {}).get("m.new_content")
    if isinstance(new_content, dict) and isinstance(new_content.get("body"), str):
        return new_content["body"]
    return edit.content.body


def _join_bodies(first: Optional[str], second: Optional[str], separator: str) -> Optional[str]:
    if not second:
        return first
    if not first:
        return second
    return f"{first}{separator}{second}"


def apply_inline_edits(records: Sequence[LogRecord]) -> List[LogRecord]:
    """
    Resolve in-band edits within one file.

    Args:
        records: Records in file order

    Returns:
        Records with edited bodies. Edit messages whose target is in the file
        are dropped; the others are kept with the edited text as their body.
        When a message was edited several times the last edit wins.
    """
    present_ids = {record.id for record in records if record.id is not None}
    latest_edit: Dict[str, LogRecord] = {}
    for record in records:
        target = _replacement_target(record)
        if target is not None:
            latest_edit[target] = record

    if not latest_edit:
        return list(records)

    result = []
    for record in records:
        target = _replacement_target(record)
        if target is not None:
            if target not in present_ids and latest_edit[target] is record:
                result.append(_with_body(record, _replacement_body(record)))
            continue
        edit = latest_edit.get(record.id) if record.id is not None else None
        if edit is not None:
            record = _with_body(record, _replacement_body(edit))
        result.append(record)
    return result


def _apply_modification(modification: Any, records: List[LogRecord]) -> List[LogRecord]:
    target = modification.target

    if isinstance(modification, Redaction):
        return [record for record in records if not target.matches(record)]

    if isinstance(modification, Edit):
        result = []
        for record in records:
            if target.matches(record):
                if modification.body is not None:
                    record = _with_body(record, modification.body)
                if modification.sender_name is not None:
                    record = record.model_copy(update={"sender_name": modification.sender_name})
            result.append(record)
        return result

    if isinstance(modification, Merge):
        result = []
        for record in records:
            if result and target.matches(record):
                previous = result[-1]
                merged = _join_bodies(previous.content.body, record.content.body, modification.separator)
                result[-1] = _with_body(previous, merged)
            else:
                result.append(record)
        return result

    raise TypeError(f"Unsupported modification: {type(modification).__name__}")


class ContentModifier:
    """Applies in-band edits, then operator corrections, to one file's records."""

    def __init__(self, modifications: Sequence[Modification] = ()) -> None:
        self._modifications = list(modifications)

    def apply(self, records: Sequence[LogRecord]) -> List[LogRecord]:
        """
        Apply all corrections to an ordered list of records.

        Args:
            records: Records of one log file, in file order

        Returns:
            New ordered list of records; the input is left untouched
        """
        modified = apply_inline_edits(records)
        for modification in self._modifications:
            modified = _apply_modification(modification, modified)

        if len(modified) != len(records):
            logger.debug(f"Corrections changed record count from {len(records)} to {len(modified)}")
        return modified


def load_modifications(file_path: Optional[Path]) -> List[Modification]:
    """
    Load operator corrections from a JSON file.

    Args:
        file_path: Path to a JSON array of corrections, or None for no corrections

    Returns:
        Parsed corrections in file order
    """
    if file_path is None:
        return []

    try:
        data = load_json(file_path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read modifications file {file_path}: {e}") from e

    try:
        modifications = _modifications_adapter.validate_python(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid modifications file {file_path}: {e}") from e

    logger.info(f"Loaded {len(modifications)} corrections from {file_path}")
    return modifications

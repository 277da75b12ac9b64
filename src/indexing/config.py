"""Run configuration: source roots, output locations and the room registry."""

import json
import logging
import os
import re
import shlex
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from utils.file_io import load_json
from .exceptions import ConfigError

# Set up logging
logger = logging.getLogger(__name__)

INDEX_FILE_EXTENSION = ".sqlite3"

# Environment variable for each setting
ENV_VARS = {
    "logs_root": "CHATLOG_LOGS_ROOT",
    "historical_logs_root": "CHATLOG_HISTORICAL_ROOT",
    "rooms_file": "CHATLOG_ROOMS_FILE",
    "index_dir": "CHATLOG_INDEX_DIR",
    "split_output_dir": "CHATLOG_SPLIT_OUTPUT_DIR",
    "split_command": "CHATLOG_SPLIT_COMMAND",
    "modifications_file": "CHATLOG_MODIFICATIONS_FILE",
    "log_level": "LOG_LEVEL",
}

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_room_name(room: str) -> str:
    """
    Map a room display name to a file-name-safe identifier.

    Runs of characters other than letters, digits, ``.``, ``_`` and ``-``
    collapse into a single ``_``; leading and trailing ``_``/``.`` are removed.

    Args:
        room: Room display name (e.g., "TC39 General")

    Returns:
        Safe identifier (e.g., "TC39_General")
    """
    sanitized = _UNSAFE_NAME_CHARS.sub("_", room).strip("_.")
    if not sanitized:
        raise ValueError(f"Room name {room!r} has no file-name-safe characters")
    return sanitized


class RoomConfig(BaseModel):
    """A configured room."""

    room: str = Field(..., min_length=1, description="Room display name")
    historical: bool = Field(
        default=False,
        description="Whether the room's logs live under the historical root",
    )

    @property
    def sanitized_name(self) -> str:
        return sanitize_room_name(self.room)


class Settings(BaseModel):
    """Locations and options for one pipeline run."""

    logs_root: Path
    historical_logs_root: Optional[Path] = None
    rooms_file: Path
    index_dir: Path
    split_output_dir: Optional[Path] = None
    split_command: Optional[List[str]] = Field(
        default=None,
        description="Splitter argv; index path and output dir are appended",
    )
    modifications_file: Optional[Path] = None
    log_level: str = "INFO"


def load_settings(env_file: Optional[Path] = None, **overrides: Any) -> Settings:
    """
    Load settings from the environment, a ``.env`` file and explicit overrides.

    Overrides that are None are ignored, so command-line options can be passed
    straight through.

    Args:
        env_file: Optional path to a ``.env`` file (default: search from cwd)
        **overrides: Values taking precedence over the environment

    Returns:
        Validated Settings
    """
    # Load environment variables from .env file
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    values: Dict[str, Any] = {}
    for name, env_var in ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            values[name] = value

    if "split_command" in values:
        values["split_command"] = shlex.split(values["split_command"])

    values.update({name: value for name, value in overrides.items() if value is not None})

    try:
        return Settings(**values)
    except ValidationError as e:
        missing = [
            ENV_VARS.get(str(error["loc"][0]), str(error["loc"][0]))
            for error in e.errors()
            if error["type"] == "missing"
        ]
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}") from e
        raise ConfigError(f"Invalid settings: {e}") from e


def load_rooms(rooms_file: Path) -> List[RoomConfig]:
    """
    Load the room registry.

    The file holds a JSON array whose items are either room names or objects
    like ``{"room": "TC39 General", "historical": true}``.

    Args:
        rooms_file: Path to the rooms JSON file

    Returns:
        Rooms in file order
    """
    try:
        data = load_json(rooms_file)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read rooms file {rooms_file}: {e}") from e

    if not isinstance(data, list):
        raise ConfigError(f"Rooms file {rooms_file} must contain a JSON array")

    rooms = []
    for item in data:
        if isinstance(item, str):
            item = {"room": item}
        try:
            rooms.append(RoomConfig.model_validate(item))
        except ValidationError as e:
            raise ConfigError(f"Invalid room entry {item!r} in {rooms_file}: {e}") from e

    logger.debug(f"Loaded {len(rooms)} rooms from {rooms_file}")
    return rooms

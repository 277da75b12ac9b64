"""Run the indexing pipeline over every configured room."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from .config import INDEX_FILE_EXTENSION, RoomConfig, Settings
from .exceptions import ConfigError, SplitError
from .models import RoomOutcome
from .modifications import ContentModifier
from .pipeline import build_room_index

# Set up logging
logger = logging.getLogger(__name__)


def resolve_source_dir(room: RoomConfig, settings: Settings) -> Path:
    """Return the directory holding a room's JSON logs."""
    if room.historical:
        if settings.historical_logs_root is None:
            raise ConfigError(
                f"Room {room.room!r} is historical but no historical logs root is configured"
            )
        return settings.historical_logs_root / room.room
    return settings.logs_root / room.room


def index_path_for(room: RoomConfig, settings: Settings) -> Path:
    """Return the index file path for a room."""
    return settings.index_dir / (room.sanitized_name + INDEX_FILE_EXTENSION)


def split_index(index_path: Path, output_dir: Path, command: Sequence[str]) -> None:
    """
    Hand a finished index to the external splitter.

    Args:
        index_path: Finished SQLite index file
        output_dir: Directory the splitter writes its chunks to
        command: Splitter argv; the two paths are appended as arguments
    """
    argv = [*command, str(index_path), str(output_dir)]
    logger.info(f"Splitting {index_path} into {output_dir}")
    try:
        subprocess.run(argv, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise SplitError(f"Splitter failed for {index_path}: {e}") from e


def run_pipeline(
    settings: Settings,
    rooms: Sequence[RoomConfig],
    modifier: Optional[ContentModifier] = None,
) -> List[RoomOutcome]:
    """
    Build and split the index of each room, one room at a time.

    The first error aborts the run. Rooms finished before it keep their
    indexes.

    Args:
        settings: Run configuration
        rooms: Rooms to process, in order
        modifier: Corrections applied to every log file

    Returns:
        One outcome per room, in order
    """
    if not settings.logs_root.is_dir():
        raise ConfigError(f"Logs root {settings.logs_root} is not a directory")
    if settings.split_command is not None and settings.split_output_dir is None:
        raise ConfigError("A split command is configured but no split output directory")

    settings.index_dir.mkdir(parents=True, exist_ok=True)
    outcomes = []

    for room in rooms:
        logger.info(f"Making index for {room.room}")
        source_dir = resolve_source_dir(room, settings)
        index_path = index_path_for(room, settings)

        build = build_room_index(source_dir, index_path, modifier=modifier)

        split = False
        if not index_path.exists():
            logger.warning(f"No index for {room.room} at {index_path}; not splitting")
        elif settings.split_command is None:
            logger.info("No split command configured; skipping split")
        else:
            split_index(index_path, settings.split_output_dir / room.sanitized_name, settings.split_command)
            split = True

        outcomes.append(RoomOutcome(room=room.room, build=build, split=split))

    return outcomes

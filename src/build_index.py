"""Entry point for building search indexes from per-room JSON chat logs."""

import argparse
import logging
import shlex
import sys
from pathlib import Path
from typing import List, Optional

# Add src directory to Python path BEFORE any other imports
src_path = Path(__file__).parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from indexing import ContentModifier, load_modifications, load_rooms, load_settings, run_pipeline

logger = logging.getLogger("build_index")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build full-text search indexes for every configured chat room."
    )
    parser.add_argument("--env-file", type=Path, help="Path to a .env file with CHATLOG_* settings.")
    parser.add_argument("--rooms-file", type=Path, help="JSON list of rooms to index.")
    parser.add_argument("--logs-root", type=Path, help="Directory holding one log folder per room.")
    parser.add_argument("--historical-root", type=Path, help="Directory holding historical rooms.")
    parser.add_argument("--index-dir", type=Path, help="Directory the .sqlite3 indexes are written to.")
    parser.add_argument("--split-output-dir", type=Path, help="Directory for split index chunks.")
    parser.add_argument(
        "--split-command",
        help="Splitter command; index path and output dir are appended.",
    )
    parser.add_argument("--no-split", action="store_true", help="Build indexes without splitting them.")
    parser.add_argument("--modifications-file", type=Path, help="JSON list of record corrections.")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level or "INFO",
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(
            env_file=args.env_file,
            rooms_file=args.rooms_file,
            logs_root=args.logs_root,
            historical_logs_root=args.historical_root,
            index_dir=args.index_dir,
            split_output_dir=args.split_output_dir,
            split_command=shlex.split(args.split_command) if args.split_command else None,
            modifications_file=args.modifications_file,
            log_level=args.log_level,
        )
        logging.getLogger().setLevel(settings.log_level.upper())
        if args.no_split:
            settings = settings.model_copy(update={"split_command": None})

        rooms = load_rooms(settings.rooms_file)
        modifier = ContentModifier(load_modifications(settings.modifications_file))
        outcomes = run_pipeline(settings, rooms, modifier=modifier)
    except Exception:
        logger.exception("Index build failed")
        return 1

    for outcome in outcomes:
        build = outcome.build
        logger.info(
            f"{outcome.room}: {build.status.value}, {build.entries_indexed} entries, "
            f"split={'yes' if outcome.split else 'no'}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Tests for running the pipeline over configured rooms."""

import json
import sys
from pathlib import Path
from typing import List

import pytest

from indexing.config import RoomConfig, Settings
from indexing.driver import index_path_for, resolve_source_dir, run_pipeline, split_index
from indexing.exceptions import ConfigError, LogFileError, SplitError
from indexing.models import BuildStatus

RECORDER_SCRIPT = """
import json, sys
with open(sys.argv[1], "a", encoding="utf-8") as f:
    f.write(json.dumps(sys.argv[2:]) + "\\n")
"""


@pytest.fixture(scope="function")
def split_log(temp_dir: Path) -> Path:
    return temp_dir / "split-calls.jsonl"


@pytest.fixture(scope="function")
def settings(temp_dir: Path, split_log: Path) -> Settings:
    """Settings with a splitter that records its arguments."""
    script = temp_dir / "record_split.py"
    script.write_text(RECORDER_SCRIPT, encoding="utf-8")
    (temp_dir / "logs").mkdir(exist_ok=True)
    (temp_dir / "historical").mkdir(exist_ok=True)
    return Settings(
        logs_root=temp_dir / "logs",
        historical_logs_root=temp_dir / "historical",
        rooms_file=temp_dir / "rooms.json",
        index_dir=temp_dir / "sql",
        split_output_dir=temp_dir / "split",
        split_command=[sys.executable, str(script), str(split_log)],
    )


def _split_calls(split_log: Path) -> List[list]:
    if not split_log.exists():
        return []
    return [json.loads(line) for line in split_log.read_text(encoding="utf-8").splitlines()]


class TestPathResolution:
    """Tests for source and index paths."""

    def test_current_and_historical_rooms(self, settings: Settings):
        """Historical rooms live under their own root."""
        assert resolve_source_dir(RoomConfig(room="TC39 General"), settings) == settings.logs_root / "TC39 General"
        assert (
            resolve_source_dir(RoomConfig(room="Old", historical=True), settings)
            == settings.historical_logs_root / "Old"
        )

    def test_historical_without_root(self, settings: Settings):
        """A historical room needs a historical root."""
        settings = settings.model_copy(update={"historical_logs_root": None})

        with pytest.raises(ConfigError):
            resolve_source_dir(RoomConfig(room="Old", historical=True), settings)

    def test_index_path_uses_sanitized_name(self, settings: Settings):
        assert index_path_for(RoomConfig(room="TC39 General"), settings) == settings.index_dir / "TC39_General.sqlite3"


class TestRunPipeline:
    """Tests for the multi-room run."""

    def test_builds_and_splits_each_room(
        self, settings: Settings, split_log: Path, write_log, sample_records
    ):
        """Every room is built, then split into its own output directory."""
        general = settings.logs_root / "TC39 General"
        general.mkdir()
        write_log(general, "2024-01-01.json", sample_records)
        old = settings.historical_logs_root / "Old Room"
        old.mkdir()
        write_log(old, "2019-05-01.json", sample_records)
        rooms = [RoomConfig(room="TC39 General"), RoomConfig(room="Old Room", historical=True)]

        outcomes = run_pipeline(settings, rooms)

        assert [outcome.room for outcome in outcomes] == ["TC39 General", "Old Room"]
        assert all(outcome.build.status == BuildStatus.BUILT for outcome in outcomes)
        assert all(outcome.split for outcome in outcomes)
        assert _split_calls(split_log) == [
            [str(settings.index_dir / "TC39_General.sqlite3"), str(settings.split_output_dir / "TC39_General")],
            [str(settings.index_dir / "Old_Room.sqlite3"), str(settings.split_output_dir / "Old_Room")],
        ]

    def test_existing_index_is_still_split(self, settings: Settings, split_log: Path, write_log, sample_records):
        """A skipped build hands the existing index to the splitter."""
        room_dir = settings.logs_root / "General"
        room_dir.mkdir()
        write_log(room_dir, "2024-01-01.json", sample_records)
        settings.index_dir.mkdir()
        (settings.index_dir / "General.sqlite3").write_bytes(b"prebuilt")

        outcomes = run_pipeline(settings, [RoomConfig(room="General")])

        assert outcomes[0].build.status == BuildStatus.SKIPPED_EXISTING
        assert outcomes[0].split is True
        assert len(_split_calls(split_log)) == 1

    def test_empty_room_is_not_split(self, settings: Settings, split_log: Path):
        """Without an index there is nothing to split."""
        (settings.logs_root / "Quiet").mkdir()

        outcomes = run_pipeline(settings, [RoomConfig(room="Quiet")])

        assert outcomes[0].build.status == BuildStatus.SKIPPED_EMPTY
        assert outcomes[0].split is False
        assert _split_calls(split_log) == []

    def test_no_split_command(self, settings: Settings, write_log, sample_records):
        """Splitting is skipped when no command is configured."""
        room_dir = settings.logs_root / "General"
        room_dir.mkdir()
        write_log(room_dir, "2024-01-01.json", sample_records)
        settings = settings.model_copy(update={"split_command": None})

        outcomes = run_pipeline(settings, [RoomConfig(room="General")])

        assert outcomes[0].build.status == BuildStatus.BUILT
        assert outcomes[0].split is False

    def test_first_error_aborts_run(self, settings: Settings, split_log: Path, write_log, sample_records):
        """A broken room stops the run; earlier rooms keep their index."""
        good = settings.logs_root / "Good"
        good.mkdir()
        write_log(good, "a.json", sample_records)
        bad = settings.logs_root / "Bad"
        bad.mkdir()
        (bad / "a.json").write_text("{", encoding="utf-8")
        later = settings.logs_root / "Later"
        later.mkdir()
        write_log(later, "a.json", sample_records)
        rooms = [RoomConfig(room="Good"), RoomConfig(room="Bad"), RoomConfig(room="Later")]

        with pytest.raises(LogFileError):
            run_pipeline(settings, rooms)

        assert (settings.index_dir / "Good.sqlite3").exists()
        assert not (settings.index_dir / "Later.sqlite3").exists()
        assert len(_split_calls(split_log)) == 1

    def test_missing_logs_root(self, settings: Settings, temp_dir: Path):
        settings = settings.model_copy(update={"logs_root": temp_dir / "absent"})

        with pytest.raises(ConfigError):
            run_pipeline(settings, [])

    def test_split_command_needs_output_dir(self, settings: Settings):
        settings = settings.model_copy(update={"split_output_dir": None})

        with pytest.raises(ConfigError):
            run_pipeline(settings, [])


class TestSplitIndex:
    """Tests for the external splitter call."""

    def test_failing_splitter(self, temp_dir: Path):
        """A non-zero exit is raised as SplitError."""
        command = [sys.executable, "-c", "import sys; sys.exit(3)"]

        with pytest.raises(SplitError):
            split_index(temp_dir / "a.sqlite3", temp_dir / "out", command)

    def test_missing_splitter(self, temp_dir: Path):
        """A splitter that cannot be started is raised as SplitError."""
        with pytest.raises(SplitError):
            split_index(temp_dir / "a.sqlite3", temp_dir / "out", [str(temp_dir / "no-such-tool")])

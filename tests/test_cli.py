"""Tests for the click command line."""

import csv
import io
import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ttjr.adapters.sqlite_store import SqliteIntervalStore
from ttjr.cli import main


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "ttjr.sqlite3"


@pytest.fixture
def run(db_path):
    runner = CliRunner()

    def _run(*args: str):
        return runner.invoke(main, ["--db-path", str(db_path), *args])

    return _run


def stored_intervals(db_path):
    store = SqliteIntervalStore(db_path)
    try:
        return list(store.query_intervals())
    finally:
        store.close()


class TestConfigCommands:
    def test_show_config(self, run):
        run("add-category", "work")
        run("set-option", "end-of-day", "17:00")

        result = run("show-config")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["categories"] == ["work"]
        assert data["options"]["end-of-day"] == "17:00"
        assert "dbversion" in data["options"]

    def test_duplicate_category(self, run):
        run("add-category", "work")
        result = run("add-category", "work")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_delete_missing_category(self, run):
        result = run("delete-category", "work")
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_rename_category(self, run, db_path):
        run("add-category", "work")
        run("start-timing", "work")

        result = run("rename-category", "--old", "work", "--new", "deep work")

        assert result.exit_code == 0
        assert [i.category for i in stored_intervals(db_path)] == ["deep work"]

    def test_invalid_end_of_day(self, run):
        result = run("set-option", "end-of-day", "25:00")
        assert result.exit_code == 1
        assert "hour must be 0-23" in result.output

    def test_unknown_option_name(self, run):
        result = run("set-option", "colour", "blue")
        assert result.exit_code == 2

    def test_unset_option(self, run):
        run("set-option", "end-of-day", "17:00")
        assert run("unset-option", "end-of-day").exit_code == 0
        assert "end-of-day" not in json.loads(run("show-config").output)["options"]


class TestTimingCommands:
    def test_start_unknown_category(self, run):
        result = run("start-timing", "work")
        assert result.exit_code == 1
        assert "does not exist" in result.output

    @patch("ttjr.cli._now")
    def test_start_switch_stop(self, mock_now, run, db_path):
        run("add-category", "work")
        run("add-category", "email")

        mock_now.return_value = 1000
        assert run("start-timing", "work").output == "Started: work\n"

        mock_now.return_value = 2000
        result = run("start-timing", "email")
        assert result.output == "Stopped: work\nStarted: email\n"

        mock_now.return_value = 5600
        result = run("stop-timing")
        assert result.exit_code == 0
        assert result.output == "Stopped: email (01:00)\n"

        intervals = stored_intervals(db_path)
        assert [(i.start_time, i.end_time) for i in intervals] == [(1000, 2000), (2000, 5600)]

    def test_stop_with_nothing_open(self, run):
        result = run("stop-timing")
        assert result.exit_code == 0
        assert result.output == "Nothing to stop.\n"

    @patch("ttjr.cli._now", return_value=1000)
    def test_currently_timing(self, mock_now, run):
        assert run("currently-timing").output == "Not currently timing.\n"

        run("add-category", "work")
        run("start-timing", "work")

        data = json.loads(run("currently-timing").output)
        assert data == {"id": 1, "category": "work", "start_time": 1000, "end_time": None}

    @patch("ttjr.cli._now", return_value=1000)
    def test_amend_time(self, mock_now, run, db_path):
        run("add-category", "work")
        run("start-timing", "work")

        result = run("amend-time", "1", "--category", "email", "--end-time", "2025-01-15 17:00")

        assert result.exit_code == 0
        interval = stored_intervals(db_path)[0]
        assert interval.category == "email"
        assert interval.start_time == 1000
        assert interval.end_time is not None

    def test_amend_missing(self, run):
        result = run("amend-time", "9", "--category", "email")
        assert result.exit_code == 1
        assert "Invalid time ID" in result.output

    def test_amend_bad_date(self, run):
        result = run("amend-time", "1", "--start-time", "gibberish")
        assert result.exit_code == 2
        assert "Unable to parse date" in result.output

    def test_delete_time(self, run, db_path):
        run("add-category", "work")
        run("start-timing", "work")

        assert run("delete-time", "1").exit_code == 0
        assert stored_intervals(db_path) == []
        assert run("delete-time", "1").exit_code == 1

    def test_bulk_delete(self, run, db_path):
        store = SqliteIntervalStore(db_path)
        store.insert_interval("work", 100, 200)
        store.insert_interval("work", 10**10, 10**10 + 60)
        store.close()

        result = run(
            "bulk-delete-times",
            "--start-time", "1969-12-30 00:00",
            "--end-time", "1971-01-01 00:00",
        )

        assert result.exit_code == 0
        assert result.output == "Deleted 1 time records\n"
        assert len(stored_intervals(db_path)) == 1

    def test_bulk_delete_inverted_range(self, run):
        result = run("bulk-delete-times", "-s", "2025-01-02", "-e", "2025-01-01")
        assert result.exit_code == 1
        assert "must be greater than" in result.output


class TestExportCommand:
    @pytest.fixture
    def populated(self, db_path):
        store = SqliteIntervalStore(db_path)
        store.add_category("A")
        store.insert_interval("A", 0, 3600)
        store.insert_interval("B, with comma", 3600, 10800)
        store.insert_interval("A", 10800, None)
        store.close()

    def test_json_stdout(self, run, populated):
        result = run("export", "--format", "json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [d["id"] for d in data] == [1, 2, 3]
        assert data[2]["end_time"] is None

    def test_csv_round_trip(self, run, populated):
        result = run("export", "-f", "csv")
        rows = list(csv.reader(io.StringIO(result.output)))
        assert rows[2][1] == "B, with comma"

    def test_summary(self, run, populated):
        result = run("export", "-f", "summary")
        assert "Logged 3 activities for a total of 03:00" in result.output
        assert "  2 logs, 01:00 cumulative, 33.33% of total" in result.output

    def test_ical_to_file_is_idempotent(self, run, populated, tmp_path):
        outfile = tmp_path / "times.ics"

        run("export", "-f", "ical", "-o", str(outfile))
        first = outfile.read_bytes()
        run("export", "-f", "ical", "-o", str(outfile))

        assert outfile.read_bytes() == first
        assert first.count(b"BEGIN:VEVENT") == 2

    def test_start_filter(self, run, populated):
        result = run("export", "-f", "json", "--start-time", "1970-01-01 02:00 UTC")
        assert [d["id"] for d in json.loads(result.output)] == [3]

    def test_unwritable_outfile(self, run, populated, tmp_path):
        result = run("export", "-f", "json", "-o", str(tmp_path / "missing" / "out.json"))
        assert result.exit_code == 1
        assert "Unable to write export" in result.output

    @patch("ttjr.cli.listen_export", side_effect=KeyboardInterrupt)
    def test_listen_stops_on_interrupt(self, mock_listen, run, populated):
        result = run("export", "-f", "ical", "--listen", "-o", "out.ics")

        assert result.exit_code == 0
        mock_listen.assert_called_once()
        assert "Stopped listening." in result.output

"""Shared workflow layer between the CLI and the ledger.

Opens the store, renders exports and runs listen mode.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

import click
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .adapters.sqlite_store import SqliteIntervalStore
from .config import Config
from .core.errors import ExportIOError, TimetrackError
from .exporters import ExportFormat, render_export
from .ledger import Ledger

logger = logging.getLogger(__name__)

STDOUT = "-"


def open_ledger(config: Config) -> Ledger:
    """Open the configured database and build a ledger over it."""
    return Ledger(SqliteIntervalStore(config.db_path))


def generate_export(
    ledger: Ledger,
    export_format: ExportFormat,
    start: int | None = None,
    end: int | None = None,
) -> str:
    """Render the intervals starting within ``[start, end)``."""
    return render_export(export_format, ledger.filter_by_time(start, end), start, end)


def write_export(text: str, outfile: str = STDOUT) -> None:
    """Write an export to a file, or to stdout for ``-``."""
    if outfile == STDOUT:
        click.echo(text, nl=False)
        return
    try:
        Path(outfile).expanduser().write_bytes(text.encode("utf-8"))
    except OSError as e:
        raise ExportIOError(f"Unable to write export to {outfile}: {e}") from e
    logger.debug(f"Wrote export to {outfile}")


class ExportWatcher:
    """Re-run an export whenever the database file changes."""

    def __init__(self, db_path: Path | str, export: Callable[[], None]):
        self.db_path = Path(db_path)
        self.export = export
        self.last_mtime: int | None = None

    def tick(self) -> bool:
        """
        Export if the database changed since the last successful export.

        A failed export is logged and retried on the next tick.

        Returns:
            True if an export was written.
        """
        try:
            mtime = self.db_path.stat().st_mtime_ns
        except OSError as e:
            logger.warning(f"Cannot stat {self.db_path}: {e}")
            return False

        if mtime == self.last_mtime:
            return False

        try:
            self.export()
        except TimetrackError as e:
            logger.error(f"Could not generate export! Error: {e}")
            return False

        self.last_mtime = mtime
        logger.info(f"Export refreshed from {self.db_path}")
        return True


def listen_export(
    config: Config,
    export_format: ExportFormat,
    outfile: str = STDOUT,
    start: int | None = None,
    end: int | None = None,
) -> None:
    """Keep ``outfile`` in sync with the database until the process is stopped."""
    ledger = open_ledger(config)

    def export_once() -> None:
        write_export(generate_export(ledger, export_format, start, end), outfile)

    watcher = ExportWatcher(config.db_path, export_once)
    scheduler = BlockingScheduler()
    scheduler.add_job(
        watcher.tick,
        IntervalTrigger(seconds=config.listen_interval),
        id="export_listen",
        next_run_time=datetime.now(),
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Listening for changes to {config.db_path} every {config.listen_interval}s")
    try:
        scheduler.start()
    finally:
        ledger.store.close()

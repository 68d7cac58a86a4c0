"""ttjr CLI - Simple time tracking."""

import json
import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path

import click

from .config import load_config
from .core.errors import TimetrackError
from .core.intervals import END_OF_DAY, format_hhmm
from .dates import parse_human_date
from .exporters import ExportFormat
from .ledger import Ledger
from .workflows import STDOUT, generate_export, listen_export, open_ledger, write_export

OPTION_NAMES = [END_OF_DAY]


@contextmanager
def _reporting_errors():
    """Print ttjr errors and exit non-zero instead of dumping a traceback."""
    try:
        yield
    except TimetrackError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _now() -> int:
    return int(time.time())


def _parse_time(value: str | None, label: str) -> int | None:
    if value is None:
        return None
    try:
        return parse_human_date(value)
    except TimetrackError as e:
        raise click.BadParameter(str(e), param_hint=label) from e


def _ledger(ctx: click.Context) -> Ledger:
    """Open the ledger once per invocation and close it when the command ends."""
    if "ledger" not in ctx.obj:
        with _reporting_errors():
            ledger = open_ledger(ctx.obj["config"])
        ctx.obj["ledger"] = ledger
        ctx.call_on_close(ledger.store.close)
    return ctx.obj["ledger"]


@click.group()
@click.version_option(package_name="ttjr")
@click.option("--db-path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="SQLite database to use (default: from ttjr.conf)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, db_path: Path | None, debug: bool):
    """ttjr - Simple CLI time tracking."""
    config = load_config()
    if db_path is not None:
        config.db_path = db_path

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else config.log_level,
    )
    ctx.obj = {"config": config}


# ============== Config ==============


@main.command("show-config")
@click.pass_context
def show_config(ctx):
    """Show config options and currently-registered categories."""
    with _reporting_errors():
        snapshot = _ledger(ctx).config.show_config()
    click.echo(json.dumps(snapshot, indent=2))


@main.command("add-category")
@click.argument("category_name")
@click.pass_context
def add_category(ctx, category_name: str):
    """Create a new category that you can use for time tracking."""
    with _reporting_errors():
        _ledger(ctx).config.add_category(category_name)
    click.echo(f"Added category '{category_name}'")


@main.command("delete-category")
@click.argument("category_name")
@click.option("--delete-logged-times", "-d", is_flag=True,
              help="Also delete every time logged against the category")
@click.pass_context
def delete_category(ctx, category_name: str, delete_logged_times: bool):
    """Delete a category."""
    with _reporting_errors():
        _ledger(ctx).config.delete_category(category_name, delete_logged_times=delete_logged_times)
    click.echo(f"Deleted category '{category_name}'")


@main.command("rename-category")
@click.option("--old", "-o", required=True, help="Current category name")
@click.option("--new", "-n", required=True, help="New category name")
@click.pass_context
def rename_category(ctx, old: str, new: str):
    """Rename a category - updates any corresponding times as well."""
    with _reporting_errors():
        _ledger(ctx).config.rename_category(old, new)
    click.echo(f"Renamed '{old}' to '{new}'")


@main.command("set-option")
@click.argument("option_name", type=click.Choice(OPTION_NAMES))
@click.argument("option_value")
@click.pass_context
def set_option(ctx, option_name: str, option_value: str):
    """Set a global option."""
    with _reporting_errors():
        _ledger(ctx).config.set_option(option_name, option_value)


@main.command("unset-option")
@click.argument("option_name", type=click.Choice(OPTION_NAMES))
@click.pass_context
def unset_option(ctx, option_name: str):
    """Remove an option."""
    with _reporting_errors():
        _ledger(ctx).config.unset_option(option_name)


# ============== Timing ==============


@main.command("start-timing")
@click.argument("category_name")
@click.pass_context
def start_timing(ctx, category_name: str):
    """Start timing an activity - stops timing any currently running activity."""
    ledger = _ledger(ctx)
    with _reporting_errors():
        previous = ledger.currently_timing()
        ledger.start_timing(category_name, _now())
    if previous:
        click.echo(f"Stopped: {previous.category}")
    click.echo(f"Started: {category_name}")


@main.command("stop-timing")
@click.pass_context
def stop_timing(ctx):
    """End timing."""
    with _reporting_errors():
        result = _ledger(ctx).stop_timing(_now())
    if not result.stopped:
        click.echo("Nothing to stop.")
        return
    for interval in result.closed:
        click.echo(f"Stopped: {interval.category} ({format_hhmm(interval.duration())})")


@main.command("currently-timing")
@click.pass_context
def currently_timing(ctx):
    """If a time record is currently open, print it."""
    with _reporting_errors():
        interval = _ledger(ctx).currently_timing()
    if interval is None:
        click.echo("Not currently timing.")
        return
    click.echo(json.dumps(interval.to_dict(), indent=2))


@main.command("amend-time")
@click.argument("time_id", type=int)
@click.option("--start-time", "-s", default=None, help="New start time")
@click.option("--end-time", "-e", default=None, help="New end time")
@click.option("--category", "-c", default=None, help="New category")
@click.pass_context
def amend_time(ctx, time_id: int, start_time: str | None, end_time: str | None, category: str | None):
    """Change the start, end or category of a logged time.

    No overlap or ordering checks are made: this is for manual correction.
    """
    new_start = _parse_time(start_time, "--start-time")
    new_end = _parse_time(end_time, "--end-time")
    with _reporting_errors():
        interval = _ledger(ctx).amend_time(time_id, new_start, new_end, category)
    click.echo(json.dumps(interval.to_dict(), indent=2))


@main.command("delete-time")
@click.argument("time_id", type=int)
@click.pass_context
def delete_time(ctx, time_id: int):
    """Delete a given time record."""
    with _reporting_errors():
        _ledger(ctx).delete_time(time_id)


@main.command("bulk-delete-times")
@click.option("--start-time", "-s", required=True, help="Start of the window")
@click.option("--end-time", "-e", required=True, help="End of the window")
@click.option("--non-inclusive", "-n", is_flag=True,
              help="Only delete times that start AND end inside the window")
@click.pass_context
def bulk_delete_times(ctx, start_time: str, end_time: str, non_inclusive: bool):
    """Delete any time records between a certain start and end time.

    By default, delete any time whose start OR end is in the window.
    """
    start = _parse_time(start_time, "--start-time")
    end = _parse_time(end_time, "--end-time")
    with _reporting_errors():
        deleted = _ledger(ctx).bulk_delete_times(start, end, inclusive=not non_inclusive)
    click.echo(f"Deleted {deleted} time records")


# ============== Export ==============


@main.command()
@click.option("--format", "-f", "export_format", required=True,
              type=click.Choice([f.value for f in ExportFormat]), help="Format of export to generate")
@click.option("--listen", "-l", is_flag=True,
              help="Watch the database for changes and re-export any time a change happens")
@click.option("--outfile", "-o", default=STDOUT, help="Filename to export to - use `-` for stdout")
@click.option("--start-time", "-s", default=None, help="Earliest entries to include (default: everything)")
@click.option("--end-time", "-e", default=None, help="Latest entries to include (default: everything)")
@click.pass_context
def export(ctx, export_format: str, listen: bool, outfile: str, start_time: str | None, end_time: str | None):
    """Export logged times for analysis."""
    start = _parse_time(start_time, "--start-time")
    end = _parse_time(end_time, "--end-time")
    fmt = ExportFormat(export_format)

    if listen:
        click.echo("Listening for changes, press Ctrl+C to stop", err=True)
        with _reporting_errors():
            try:
                listen_export(ctx.obj["config"], fmt, outfile, start, end)
            except KeyboardInterrupt:
                click.echo("\nStopped listening.", err=True)
        return

    with _reporting_errors():
        text = generate_export(_ledger(ctx), fmt, start, end)
        write_export(text, outfile)


if __name__ == "__main__":
    main()

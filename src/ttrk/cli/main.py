"""Main CLI application."""

import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.markup import escape

from ttrk import __version__
from ttrk.cli.config_commands import config
from ttrk.core.config import ConfigManager
from ttrk.core.duration import format_duration
from ttrk.core.editor import edit_log, resolve_editor
from ttrk.core.errors import InvalidMessageError, TrackerError, TtrkError
from ttrk.core.fixup import format_log
from ttrk.core.storage import LogStorage
from ttrk.core.timefmt import now, render_prose
from ttrk.core.tracker import TimeTracker
from ttrk.export_import import CSVExporter
from ttrk.logging_setup import setup_logging

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)


def fail(error: object) -> NoReturn:
    """Report a fatal error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {escape(str(error))}", soft_wrap=True)
    sys.exit(1)


def warn(error: object) -> None:
    """Report a failed precondition; the command still completes."""
    error_console.print(f"[red]Error:[/red] {escape(str(error))}", soft_wrap=True)


def get_tracker(ctx: click.Context) -> TimeTracker:
    """Load the log and get a TimeTracker for it."""
    config_mgr: ConfigManager = ctx.obj["config"]
    logfile = ctx.obj.get("logfile") or config_mgr.get("general.logfile")

    try:
        storage = LogStorage(Path(logfile) if logfile else None)
        return TimeTracker(
            storage,
            clock=ctx.obj.get("clock", now),
            week_start=config_mgr.get("general.week_start", "sunday"),
        )
    except TtrkError as e:
        fail(e)


def save_tracker(tracker: TimeTracker) -> None:
    """Write the log back, exiting on failure."""
    try:
        tracker.save()
    except TtrkError as e:
        fail(e)


def _plain(text: str) -> None:
    console.print(text, markup=False, highlight=False, soft_wrap=True)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "-l",
    "--logfile",
    type=click.Path(dir_okay=False),
    help="The JSON log file to record sessions in (default: ~/.ttrk.json)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Configuration file (default: ~/.ttrk/config.yml)",
)
@click.pass_context
def cli(ctx: click.Context, logfile: Optional[str], config_path: Optional[str]) -> None:
    """ttrk - Track work sessions from the command line.

    Begin a session, end it with a message of what was done, and review or
    fix up the log afterwards.
    """
    ctx.ensure_object(dict)
    ctx.obj["logfile"] = logfile

    try:
        config_mgr = ConfigManager(Path(config_path) if config_path else None)
    except (TtrkError, OSError) as e:
        fail(e)
    ctx.obj["config"] = config_mgr

    setup_logging(config_mgr.get("advanced.log_level", "WARNING"))


@cli.command()
@click.pass_context
def begin(ctx: click.Context) -> None:
    """Begin a session.

    Example:
        ttrk begin
    """
    tracker = get_tracker(ctx)

    try:
        tracker.begin()
        console.print("Started a session.")
    except TrackerError as e:
        warn(e)

    save_tracker(tracker)


@cli.command()
@click.argument("message")
@click.pass_context
def end(ctx: click.Context, message: str) -> None:
    """End a session, giving a message of what was done.

    Example:
        ttrk end "Wrote the parser tests"
    """
    tracker = get_tracker(ctx)

    try:
        session = tracker.end(message)
    except InvalidMessageError as e:
        fail(e)
    except TrackerError as e:
        warn(e)
    else:
        _plain(
            f"Ended session started {render_prose(session.start)}.\n"
            f"Elapsed time: {format_duration(session.elapsed(tracker.clock()))}."
        )

    save_tracker(tracker)


@cli.command()
@click.pass_context
def cancel(ctx: click.Context) -> None:
    """Cancel the current session.

    Example:
        ttrk cancel
    """
    tracker = get_tracker(ctx)

    try:
        session = tracker.cancel()
    except TrackerError as e:
        warn(e)
    else:
        _plain(f"Canceled session that was started {render_prose(session.start)}.")

    save_tracker(tracker)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Get the status of the current session and of the log overall.

    Example:
        ttrk status
    """
    tracker = get_tracker(ctx)
    summary = tracker.status()

    plural = "" if summary.completed_count == 1 else "s"
    _plain(
        "=== Status ===\n"
        f"- Logged {summary.completed_count} completed session{plural}.\n"
        f"- Total elapsed time (completed only): {format_duration(summary.total)}\n"
        f"- Total elapsed time today (completed only): {format_duration(summary.today)}\n"
        f"- Total elapsed time this week (completed only): {format_duration(summary.this_week)}"
    )

    last = summary.last_completed
    if last is not None and last.end is not None:
        _plain(
            "\n=== Most recent completed session ===\n"
            f"- Began {render_prose(last.start)}\n"
            f"- Ended {render_prose(last.end)}\n"
            f"- Time elapsed: {format_duration(last.end - last.start)}\n"
            f'- Message: "{last.message}"'
        )

    if summary.current is not None and summary.current_elapsed is not None:
        _plain(
            "\n=== Current session ===\n"
            f"- Began {render_prose(summary.current.start)}\n"
            f"- Time elapsed: {format_duration(summary.current_elapsed)}"
        )

    save_tracker(tracker)


@cli.command(name="list")
@click.pass_context
def list_sessions(ctx: click.Context) -> None:
    """Show all sessions, completed and current.

    Example:
        ttrk list
    """
    tracker = get_tracker(ctx)
    click.echo(format_log(tracker.log, tracker.clock()))
    save_tracker(tracker)


@cli.command()
@click.pass_context
def fixup(ctx: click.Context) -> None:
    """Fix up the log in your $EDITOR.

    The whole log is replaced by the edited text once the editor exits.

    Example:
        EDITOR=vim ttrk fixup
    """
    tracker = get_tracker(ctx)
    config_mgr: ConfigManager = ctx.obj["config"]

    try:
        editor = resolve_editor(config_mgr.get("general.editor"))
        new_log = edit_log(tracker.log, editor, tracker.clock())
    except TtrkError as e:
        logger.info(f"Fixup aborted, log left unchanged: {e}")
        fail(e)

    tracker.replace_log(new_log)
    save_tracker(tracker)
    console.print("Successfully edited the log.")


@cli.command()
@click.pass_context
def csv(ctx: click.Context) -> None:
    """Export completed sessions to CSV on stdout.

    Example:
        ttrk csv > sessions.csv
    """
    tracker = get_tracker(ctx)
    CSVExporter(sys.stdout).export_log(tracker.log)
    save_tracker(tracker)


cli.add_command(config)


if __name__ == "__main__":
    cli(obj={})

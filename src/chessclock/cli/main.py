"""Main CLI application."""

import json
import sys
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
from rich.console import Console
from rich.table import Table

from chessclock import __version__
from chessclock.cli.daemon_commands import daemon
from chessclock.core.models import StopReason
from chessclock.daemon.ipc import NOT_FOUND, IPCClient, IPCError

console = Console()
error_console = Console(stderr=True)


def get_client(socket_path: Optional[str] = None) -> IPCClient:
    """Get IPCClient instance with optional custom socket path."""
    return IPCClient(Path(socket_path) if socket_path else None)


def format_duration(seconds: Optional[int]) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds is None:
        return "ongoing"

    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    else:
        return f"{secs}s"


def format_timestamp(timestamp: int) -> str:
    """Format a unix timestamp as a UTC time of day."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%H:%M:%S")


def format_day(day_key: int) -> str:
    """Format a day key as its UTC date."""
    return datetime.fromtimestamp(day_key, tz=timezone.utc).strftime("%Y-%m-%d")


def parse_day(value: Optional[str]) -> int:
    """Parse 'today', 'yesterday' or YYYY-MM-DD into a UTC midnight timestamp.

    Raises:
        click.BadParameter: If the date cannot be parsed
    """
    today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    if value is None or value.lower() == "today":
        day = today
    elif value.lower() == "yesterday":
        day = today - timedelta(days=1)
    else:
        try:
            day = datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        except ValueError:
            raise click.BadParameter("Use YYYY-MM-DD, 'today', or 'yesterday'", param_hint="DATE")
    return int(day.timestamp())


def fail(error: IPCError) -> NoReturn:
    """Print an RPC error and exit."""
    if error.code == NOT_FOUND:
        error_console.print(f"[yellow]No time sheet:[/yellow] {error}")
    else:
        error_console.print(f"[red]Error:[/red] {error}")
    sys.exit(1)


def call(ctx: click.Context, method: str, params: Optional[dict[str, Any]] = None) -> Any:
    """Call the daemon, exiting with an error message on failure."""
    client = get_client(ctx.obj.get("socket_path"))
    try:
        return client.call(method, params)
    except IPCError as e:
        fail(e)


@click.group()
@click.version_option(version=__version__)
@click.option("--socket", "socket_path", help="Daemon socket path", type=click.Path())
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(ctx: click.Context, socket_path: Optional[str], no_color: bool) -> None:
    """ChessClock - personal time tracking.

    Record when tasks start and stop, then review each day's schedule
    and the time spent per tag.
    """
    ctx.ensure_object(dict)
    ctx.obj["socket_path"] = socket_path

    if no_color:
        console.no_color = True
        error_console.no_color = True


cli.add_command(daemon)


@cli.command()
@click.argument("tag")
@click.option("-d", "--description", default="", help="Task description")
@click.option("--at", "timestamp", type=int, help="Unix timestamp (default: now)")
@click.pass_context
def start(ctx: click.Context, tag: str, description: str, timestamp: Optional[int]) -> None:
    """Start working on TAG.

    Example:
        chessclock start work -d "code review"
    """
    result = call(
        ctx,
        "start",
        {
            "timestamp": timestamp or int(time.time()),
            "tag": tag,
            "description": description,
        },
    )
    console.print(f"[green]▶[/green]  Started: {result['tag']}")
    console.print(f"  At: {format_timestamp(result['timestamp'])} UTC")


@cli.command()
@click.option(
    "-r",
    "--reason",
    type=click.Choice([r.label for r in StopReason], case_sensitive=False),
    default=StopReason.ENDOFDAY.label,
    show_default=True,
    help="Why the task stopped",
)
@click.option("--at", "timestamp", type=int, help="Unix timestamp (default: now)")
@click.pass_context
def stop(ctx: click.Context, reason: str, timestamp: Optional[int]) -> None:
    """Stop the current task.

    Example:
        chessclock stop -r lunch
    """
    result = call(ctx, "stop", {"timestamp": timestamp or int(time.time()), "reason": reason})
    console.print(f"[yellow]⏹[/yellow]  Stopped: {result['reason']}")
    console.print(f"  At: {format_timestamp(result['timestamp'])} UTC")


@cli.command()
@click.argument("date", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def schedule(ctx: click.Context, date: Optional[str], as_json: bool) -> None:
    """Show the schedule of DATE (default: today).

    Example:
        chessclock schedule 2023-01-05
    """
    day = parse_day(date)
    tasks = call(ctx, "schedule", {"date": day})["tasks"]

    if as_json:
        print(json.dumps(tasks, indent=2))
        return

    table = Table(title=f"Schedule for {format_day(day)}")
    table.add_column("Time (UTC)", style="cyan")
    table.add_column("Tag", style="bold")
    table.add_column("Description")

    for task in tasks:
        table.add_row(format_timestamp(task["timestamp"]), task["tag"], task["description"] or "-")

    console.print(table)


@cli.command()
@click.argument("date", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tally(ctx: click.Context, date: Optional[str], as_json: bool) -> None:
    """Show time spent per tag on DATE (default: today).

    Example:
        chessclock tally yesterday
    """
    day = parse_day(date)
    tasks = call(ctx, "tally", {"date": day})["tasks"]

    if as_json:
        print(json.dumps(tasks, indent=2))
        return

    table = Table(title=f"Tally for {format_day(day)}")
    table.add_column("Tag", style="bold")
    table.add_column("Time", style="magenta")
    table.add_column("Description")

    for task in sorted(tasks, key=lambda t: t["timespan"], reverse=True):
        table.add_row(task["tag"], format_duration(task["timespan"]), task["description"] or "-")

    console.print(table)


@cli.command()
@click.argument("date", required=False)
@click.pass_context
def tags(ctx: click.Context, date: Optional[str]) -> None:
    """List the tags used on DATE (default: today)."""
    day = parse_day(date)
    found = call(ctx, "list_tags", {"date": day})["tags"]

    if not found:
        console.print("[yellow]No tags recorded[/yellow]")
        return

    for tag in found:
        console.print(tag)


@cli.command()
@click.pass_context
def sheets(ctx: click.Context) -> None:
    """List the days that have a time sheet."""
    dates = call(ctx, "list_time_sheets")["dates"]

    if not dates:
        console.print("[yellow]No time sheets found[/yellow]")
        return

    for day in dates:
        console.print(format_day(day))


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show client and daemon versions."""
    console.print(f"Client: {__version__}")
    daemon_version = call(ctx, "version")["version"]
    console.print(f"Daemon: {daemon_version}")


if __name__ == "__main__":
    cli(obj={})

"""CLI commands for daemon management."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chessclock.daemon.ipc import IPCClient, IPCError

console = Console()


def _client(ctx: click.Context) -> IPCClient:
    socket_path: Optional[str] = (ctx.obj or {}).get("socket_path")
    return IPCClient(Path(socket_path) if socket_path else None)


@click.group()
def daemon() -> None:
    """Manage the ChessClock background daemon."""
    pass


@daemon.command()
@click.option(
    "--foreground",
    "-f",
    is_flag=True,
    help="Run daemon in foreground (don't daemonize)",
)
@click.pass_context
def run(ctx: click.Context, foreground: bool) -> None:
    """Start the background daemon."""
    from chessclock.daemon import ChessClockDaemon

    if _client(ctx).is_daemon_running():
        console.print("[yellow]Daemon is already running[/yellow]")
        return

    socket_path = (ctx.obj or {}).get("socket_path")
    if foreground:
        console.print("[cyan]Starting daemon in foreground...[/cyan]")
    else:
        console.print("[cyan]Starting daemon in background...[/cyan]")

    try:
        daemon_instance = ChessClockDaemon(socket_path=Path(socket_path) if socket_path else None)
        daemon_instance.start(foreground=foreground)
    except KeyboardInterrupt:
        console.print("\n[yellow]Daemon stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@daemon.command()
@click.pass_context
def shutdown(ctx: click.Context) -> None:
    """Stop the background daemon."""
    try:
        console.print("[cyan]Stopping daemon...[/cyan]")
        _client(ctx).call("shutdown")
        console.print("[green]✓[/green] Daemon stopped")
    except IPCError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[yellow]Daemon may not be running[/yellow]")
        sys.exit(1)


@daemon.command()
@click.option("--verbose", "-v", is_flag=True, help="Show detailed status")
@click.pass_context
def status(ctx: click.Context, verbose: bool) -> None:
    """Show daemon status."""
    client = _client(ctx)

    try:
        if not client.is_daemon_running():
            console.print("[yellow]Daemon is not running[/yellow]")
            return

        status_data = client.call("status")
        state = status_data.get("state", {})

        if verbose:
            table = Table(title="Daemon Status", show_header=True)
            table.add_column("Property", style="cyan")
            table.add_column("Value", style="green")

            table.add_row("Status", "Running" if status_data.get("running") else "Stopped")
            table.add_row("PID", str(state.get("pid", "N/A")))
            table.add_row("Started At", state.get("started_at", "N/A"))
            table.add_row("Version", state.get("version", "N/A"))
            table.add_row("", "")
            table.add_row("Data Directory", state.get("data_dir") or "N/A")
            table.add_row("Max Time Sheets", str(state.get("max_files", "N/A")))
            table.add_row("Events Recorded", str(state.get("events_recorded", 0)))
            table.add_row("Last Event", str(state.get("last_event_timestamp") or "N/A"))

            console.print(table)
        else:
            status_text = f"""
[green]●[/green] Daemon is running
  PID: {state.get('pid', 'N/A')}
  Started: {state.get('started_at', 'N/A')}
  Events recorded: {state.get('events_recorded', 0)}
            """
            console.print(Panel(status_text.strip(), title="Daemon Status"))

    except IPCError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@daemon.command()
@click.option("--lines", "-n", default=50, help="Number of log lines to show")
def logs(lines: int) -> None:
    """View daemon logs."""
    from chessclock.daemon.platform import get_log_file_path

    log_file = get_log_file_path()

    if not log_file.exists():
        console.print("[yellow]No log file found[/yellow]")
        return

    with open(log_file, "r") as f:
        last_lines = f.readlines()[-lines:]
    console.print("".join(last_lines), markup=False, highlight=False)

"""
ChessClock Daemon - background service recording start/stop events.

The daemon provides:
- JSON-RPC interface over a Unix socket
- Per-day time sheets with retention
- Schedule, tally and tag queries
"""

from chessclock.daemon.daemon import ChessClockDaemon
from chessclock.daemon.ipc import IPCClient, IPCServer
from chessclock.daemon.state import DaemonState

__all__ = ["ChessClockDaemon", "IPCServer", "IPCClient", "DaemonState"]

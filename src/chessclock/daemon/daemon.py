"""Main daemon implementation."""

import logging
import os
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from chessclock.core.clock import ChessClock
from chessclock.core.config import ConfigManager
from chessclock.core.storage import EventLog
from chessclock.daemon.handlers import RequestHandlers
from chessclock.daemon.ipc import IPCServer
from chessclock.daemon.platform import (
    get_log_file_path,
    get_pid_file_path,
    is_daemon_supported,
)
from chessclock.daemon.state import PIDFileManager, StateManager

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class DaemonError(Exception):
    """Daemon-related error."""

    pass


class ChessClockDaemon:
    """ChessClock background daemon.

    Serves the clock over a JSON-RPC Unix socket until it receives a
    termination signal or a ``shutdown`` request.
    """

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        socket_path: Optional[Path] = None,
        state_manager: Optional[StateManager] = None,
        pid_manager: Optional[PIDFileManager] = None,
    ):
        """Initialize daemon.

        Args:
            config: Configuration manager (default: load from default location)
            socket_path: IPC socket path (default: from config, else platform default)
            state_manager: State persistence (default: runtime state file)
            pid_manager: PID file manager (default: runtime PID file)

        Raises:
            DaemonError: If daemon is not supported on this platform
        """
        supported, reason = is_daemon_supported()
        if not supported:
            raise DaemonError(reason)

        self.config = config or ConfigManager()
        if socket_path is None and self.config.get("daemon.socket_path"):
            socket_path = Path(self.config.get("daemon.socket_path")).expanduser()

        self.log = EventLog(self.config.data_dir, max_files=self.config.max_files)
        self.clock = ChessClock(self.log)
        self.state_manager = state_manager or StateManager()
        self.pid_manager = pid_manager or PIDFileManager(get_pid_file_path())
        self.ipc_server = IPCServer(socket_path)
        self.handlers = RequestHandlers(self.clock, on_event=self.state_manager.record_event)

        self.running = False
        self._shutdown_event = threading.Event()
        self._stop_lock = threading.Lock()

    def start(self, foreground: bool = False) -> None:
        """Start the daemon and block until it is stopped.

        Args:
            foreground: Run in foreground (don't daemonize)

        Raises:
            DaemonError: If daemon is already running or fails to start
        """
        if self.pid_manager.is_running():
            raise DaemonError("Daemon is already running")

        if not foreground:
            self._daemonize()

        self._setup_logging()
        logger.info("Starting ChessClock daemon...")

        self.pid_manager.write(os.getpid())
        self.state_manager.initialize(
            os.getpid(),
            data_dir=str(self.config.data_dir),
            max_files=self.config.max_files,
        )

        self._setup_signal_handlers()
        self._register_ipc_handlers()

        try:
            self.ipc_server.start()
        except OSError as e:
            logger.error(f"Failed to start IPC server: {e}")
            self.cleanup()
            raise DaemonError(f"Failed to start IPC server: {e}")

        self.running = True
        logger.info(f"Daemon started (PID: {os.getpid()}), storing time sheets in {self.log.log_dir}")

        self._shutdown_event.wait()

    def stop(self) -> None:
        """Stop the daemon gracefully."""
        with self._stop_lock:
            if not self.running:
                self._shutdown_event.set()
                return
            logger.info("Stopping daemon...")
            self.running = False

        self.ipc_server.stop()
        self.cleanup()
        self._shutdown_event.set()
        logger.info("Daemon stopped")

    def cleanup(self) -> None:
        """Clean up daemon resources."""
        self.pid_manager.remove()
        self.state_manager.clear()

    def _setup_logging(self) -> None:
        """Setup daemon logging."""
        log_level = getattr(logging, self.config.get("daemon.log_level", "INFO"))

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        formatter = logging.Formatter(LOG_FORMAT)

        file_handler = logging.FileHandler(get_log_file_path())
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        # Console handler (for foreground mode)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    def _daemonize(self) -> None:
        """Daemonize the process (Unix double-fork)."""
        try:
            pid = os.fork()
            if pid > 0:
                sys.exit(0)

            # Decouple from parent environment
            os.chdir("/")
            os.setsid()
            os.umask(0o077)

            pid = os.fork()
            if pid > 0:
                sys.exit(0)

            # Redirect standard file descriptors
            sys.stdout.flush()
            sys.stderr.flush()
            with open(os.devnull, "r") as devnull:
                os.dup2(devnull.fileno(), sys.stdin.fileno())
            with open(os.devnull, "a+") as devnull:
                os.dup2(devnull.fileno(), sys.stdout.fileno())
            with open(os.devnull, "a+") as devnull:
                os.dup2(devnull.fileno(), sys.stderr.fileno())

        except OSError as e:
            logger.error(f"Failed to daemonize: {e}")
            sys.exit(1)

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        for signum in (signal.SIGTERM, signal.SIGINT, signal.SIGHUP, signal.SIGQUIT):
            signal.signal(signum, self._signal_handler)

    def _signal_handler(self, signum: int, frame: Any) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        # Signal handlers run on the main thread, which is blocked in start()
        threading.Thread(target=self.stop, daemon=True).start()

    def _register_ipc_handlers(self) -> None:
        """Register IPC request handlers."""
        self.handlers.register(self.ipc_server)
        self.ipc_server.register_handler("status", self._handle_status)
        self.ipc_server.register_handler("shutdown", self._handle_shutdown)

    def _handle_status(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle status request."""
        return {
            "running": self.running,
            "state": self.state_manager.get_dict(),
        }

    def _handle_shutdown(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle shutdown request."""
        # Stop in separate thread to avoid blocking IPC response
        threading.Thread(target=self.stop, daemon=True).start()
        return {"stopping": True}

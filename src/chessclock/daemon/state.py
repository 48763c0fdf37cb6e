"""Daemon state management and persistence."""

import json
import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import psutil  # type: ignore[import-untyped]

from chessclock import __version__
from chessclock.daemon.platform import get_state_file_path

logger = logging.getLogger(__name__)


@dataclass
class DaemonState:
    """Daemon state information."""

    # Daemon metadata
    started_at: str
    pid: int
    version: str = __version__

    # Storage
    data_dir: Optional[str] = None
    max_files: int = 5

    # Activity
    events_recorded: int = 0
    last_event_timestamp: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaemonState":
        """Create state from dictionary."""
        return cls(**data)


class StateManager:
    """Manages daemon state persistence."""

    def __init__(self, state_file: Optional[Path] = None):
        """Initialize state manager.

        Args:
            state_file: Path to state file (default: ~/.chessclock/runtime/state.json)
        """
        self.state_file = state_file or get_state_file_path()
        self._state: Optional[DaemonState] = None
        self._lock = threading.Lock()

    def initialize(self, pid: int, **kwargs: Any) -> DaemonState:
        """Initialize daemon state.

        Args:
            pid: Daemon process ID
            **kwargs: Initial values of other state fields

        Returns:
            Initialized daemon state
        """
        with self._lock:
            self._state = DaemonState(started_at=datetime.now().isoformat(), pid=pid, **kwargs)
            self._save()
            logger.info("Daemon state initialized")
            return self._state

    def load(self) -> Optional[DaemonState]:
        """Load daemon state from file.

        Returns:
            Loaded state or None if file doesn't exist or is unreadable
        """
        if not self.state_file.exists():
            return None

        try:
            with open(self.state_file, "r") as f:
                data = json.load(f)
            self._state = DaemonState.from_dict(data)
            return self._state
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load daemon state: {e}")
            return None

    def _save(self) -> None:
        """Internal save method (assumes lock is held)."""
        if self._state is None:
            return

        try:
            # Atomic write: write to temp file, then rename
            temp_file = self.state_file.with_suffix(".tmp")
            with open(temp_file, "w") as f:
                json.dump(self._state.to_dict(), f, indent=2)
            temp_file.replace(self.state_file)
        except OSError as e:
            logger.error(f"Failed to save daemon state: {e}")

    def update(self, **kwargs: Any) -> None:
        """Update state fields."""
        with self._lock:
            if self._state is None:
                logger.warning("Cannot update uninitialized state")
                return

            for key, value in kwargs.items():
                if hasattr(self._state, key):
                    setattr(self._state, key, value)
                else:
                    logger.warning(f"Unknown state field: {key}")

            self._save()

    def record_event(self, timestamp: int) -> None:
        """Count a recorded start/stop event."""
        with self._lock:
            if self._state is None:
                return
            self._state.events_recorded += 1
            self._state.last_event_timestamp = timestamp
            self._save()

    def get(self) -> Optional[DaemonState]:
        """Get current state."""
        with self._lock:
            return self._state

    def get_dict(self) -> Dict[str, Any]:
        """Get current state as dictionary."""
        with self._lock:
            if self._state is None:
                return {}
            return self._state.to_dict()

    def clear(self) -> None:
        """Clear state and delete state file."""
        with self._lock:
            self._state = None
            self.state_file.unlink(missing_ok=True)
            logger.info("Daemon state cleared")


class PIDFileManager:
    """Manages daemon PID file."""

    def __init__(self, pid_file: Path):
        """Initialize PID file manager.

        Args:
            pid_file: Path to PID file
        """
        self.pid_file = pid_file
        self.pid_file.parent.mkdir(parents=True, exist_ok=True)

    def write(self, pid: int) -> None:
        """Write PID to file."""
        with open(self.pid_file, "w") as f:
            f.write(str(pid))
        logger.debug(f"PID {pid} written to {self.pid_file}")

    def read(self) -> Optional[int]:
        """Read PID from file.

        Returns:
            PID or None if file doesn't exist or is invalid
        """
        if not self.pid_file.exists():
            return None

        try:
            with open(self.pid_file, "r") as f:
                return int(f.read().strip())
        except (ValueError, OSError) as e:
            logger.error(f"Failed to read PID file: {e}")
            return None

    def remove(self) -> None:
        """Remove PID file."""
        try:
            self.pid_file.unlink(missing_ok=True)
            logger.debug(f"PID file {self.pid_file} removed")
        except OSError as e:
            logger.error(f"Failed to remove PID file: {e}")

    def is_running(self) -> bool:
        """Check if the process recorded in the PID file is alive."""
        pid = self.read()
        if pid is None:
            return False
        return bool(psutil.pid_exists(pid))

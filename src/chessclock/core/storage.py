"""Per-day append-only event log with file locking and retention."""

import csv
import fcntl
import logging
import os
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from chessclock.core.codec import decode_record, encode_event
from chessclock.core.errors import InvalidFileNameError, MalformedRecordError, NotFoundError
from chessclock.core.models import Event
from chessclock.core.retention import Retention

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
FILE_DATE_FORMAT = "%Y_%m_%d"
FILE_SUFFIX = ".log"
DEFAULT_MAX_FILES = 5

# 9999-12-31 23:59:59 UTC, the last instant a day file can be named for
MAX_TIMESTAMP = 253402300799

_FILE_NAME_RE = re.compile(r"\d{4}_\d{2}_\d{2}\.log", re.ASCII)

# Descriptions have no length limit
csv.field_size_limit(2**31 - 1)


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Lock a file.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    fcntl.flock(file_obj.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file.

    Args:
        file_obj: File object to unlock
    """
    fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


def day_key_for(timestamp: int) -> int:
    """Truncate a unix timestamp to the UTC midnight of its day.

    Args:
        timestamp: Unix timestamp in seconds

    Returns:
        Unix timestamp of that day's UTC midnight
    """
    return timestamp - (timestamp % SECONDS_PER_DAY)


class EventLog:
    """Stores events in one tab-delimited file per UTC day.

    All reads, appends and deletions of the log directory go through this
    class. Appends and deletions on the same day are serialized by a
    per-day lock; different days proceed independently.
    """

    def __init__(self, log_dir: Optional[Path] = None, max_files: int = DEFAULT_MAX_FILES):
        """Initialize event log.

        Args:
            log_dir: Directory holding day files. Defaults to ~/.chessclock/logs
            max_files: Maximum number of day files retained
        """
        if log_dir is None:
            log_dir = Path.home() / ".chessclock" / "logs"

        self.log_dir = log_dir
        self.retention = Retention(max_files)
        self._day_locks: dict[int, threading.Lock] = {}
        self._guard = threading.Lock()

    @staticmethod
    def file_name(day_key: int) -> str:
        """File name of the log for a day key.

        Raises:
            ValueError: If the day cannot be expressed as a calendar date
        """
        try:
            day = datetime.fromtimestamp(day_key, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ValueError(f"Day key out of range: {day_key}")
        return day.strftime(FILE_DATE_FORMAT) + FILE_SUFFIX

    @staticmethod
    def parse_file_name(name: str) -> int:
        """Parse a ``YYYY_MM_DD.log`` file name back into a day key.

        Raises:
            InvalidFileNameError: If the name does not follow the convention
        """
        if not _FILE_NAME_RE.fullmatch(name):
            raise InvalidFileNameError(name)
        try:
            day = datetime.strptime(name[: -len(FILE_SUFFIX)], FILE_DATE_FORMAT)
        except ValueError:
            raise InvalidFileNameError(name)
        return int(day.replace(tzinfo=timezone.utc).timestamp())

    def path_for(self, day_key: int) -> Path:
        """Path of the log file for a day key."""
        return self.log_dir / self.file_name(day_key)

    def _lock_for(self, day_key: int) -> threading.Lock:
        with self._guard:
            lock = self._day_locks.get(day_key)
            if lock is None:
                lock = threading.Lock()
                self._day_locks[day_key] = lock
            return lock

    def append(self, timestamp: int, event: Event) -> None:
        """Append an event to the log of the day containing ``timestamp``.

        Retention is enforced once the record is on disk.

        Args:
            timestamp: Timestamp selecting the day file (UTC)
            event: Event to append

        Raises:
            ValueError: If the timestamp lies beyond the year 9999
        """
        day_key = day_key_for(timestamp)
        path = self.path_for(day_key)

        with self._lock_for(day_key):
            self.log_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
            path.touch(mode=0o600, exist_ok=True)
            with open(path, "a", newline="", encoding="utf-8") as f:
                _lock_file(f, exclusive=True)
                try:
                    writer = csv.writer(f, delimiter="\t", lineterminator="\n")
                    writer.writerow(encode_event(event))

                    # Flush to disk
                    f.flush()
                    os.fsync(f.fileno())
                finally:
                    _unlock_file(f)

        logger.debug(f"Appended {type(event).__name__} to {path.name}")
        self.retention.enforce(self)

    def read(self, day_key: int) -> list[Event]:
        """Read every event of a day in file order.

        Args:
            day_key: Any timestamp within the day

        Returns:
            Events in the order they were appended

        Raises:
            NotFoundError: If there is no log for that day
            MalformedRecordError: On the first undecodable record or broken quoting
            UnknownReasonError: On the first stop record with an unknown reason
            UnknownRecordTypeError: On the first record of an unknown kind
        """
        day_key = day_key_for(day_key)
        try:
            path = self.path_for(day_key)
        except ValueError:
            raise NotFoundError(day_key)

        try:
            f = open(path, newline="", encoding="utf-8")
        except FileNotFoundError:
            raise NotFoundError(day_key)

        with f:
            _lock_file(f, exclusive=False)
            try:
                reader = csv.reader(f, delimiter="\t", skipinitialspace=True)
                rows = list(reader)
            except csv.Error as e:
                raise MalformedRecordError(f"Unreadable record in {path.name}: {e}")
            finally:
                _unlock_file(f)

        return [decode_record(row) for row in rows if row]

    def list_day_keys(self) -> list[int]:
        """List the day keys of every stored log, oldest first.

        Raises:
            InvalidFileNameError: If any file name does not parse
        """
        if not self.log_dir.exists():
            return []
        return sorted(self.parse_file_name(entry.name) for entry in self.log_dir.iterdir())

    def delete(self, day_key: int) -> None:
        """Delete the log of a day. Deleting a missing log is not an error."""
        day_key = day_key_for(day_key)
        with self._lock_for(day_key):
            self.path_for(day_key).unlink(missing_ok=True)
        with self._guard:
            self._day_locks.pop(day_key, None)

"""Retention policy capping the number of stored time sheets."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chessclock.core.storage import EventLog

logger = logging.getLogger(__name__)


class Retention:
    """Keep at most ``max_files`` day files, removing the oldest first."""

    def __init__(self, max_files: int):
        """Initialize retention policy.

        Args:
            max_files: Maximum number of day files to keep

        Raises:
            ValueError: If max_files is not positive
        """
        if max_files < 1:
            raise ValueError(f"max_files must be positive, got {max_files}")
        self.max_files = max_files

    def enforce(self, log: "EventLog") -> list[int]:
        """Delete the oldest day files until at most ``max_files`` remain.

        The directory is re-listed after every deletion so concurrent
        appends and deletions are picked up.

        Args:
            log: Event log owning the day files

        Returns:
            Day keys that were removed
        """
        removed: list[int] = []
        day_keys = log.list_day_keys()
        while len(day_keys) > self.max_files:
            oldest = day_keys[0]
            log.delete(oldest)
            removed.append(oldest)
            logger.info(f"Retention removed time sheet {log.file_name(oldest)}")
            day_keys = log.list_day_keys()
        return removed

"""JSON-RPC handlers exposing the clock over IPC.

Request validation lives here: the core assumes positive timestamps,
non-empty tags and tab/newline free text.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

from chessclock import __version__
from chessclock.core.clock import ChessClock
from chessclock.core.errors import ChessClockError, NotFoundError
from chessclock.core.models import StopReason
from chessclock.core.storage import MAX_TIMESTAMP
from chessclock.daemon.ipc import INTERNAL_ERROR, INVALID_PARAMS, NOT_FOUND, IPCServer, RPCError

logger = logging.getLogger(__name__)

_FORBIDDEN_CHARS = ("\t", "\n", "\r")


def _require_timestamp(params: Dict[str, Any], name: str, message: str) -> int:
    value = params.get(name)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise RPCError(INVALID_PARAMS, message)
    return value


def _require_event_time(params: Dict[str, Any]) -> int:
    timestamp = _require_timestamp(params, "timestamp", "Must specify a timestamp")
    if timestamp > MAX_TIMESTAMP:
        raise RPCError(INVALID_PARAMS, f"timestamp must not be later than {MAX_TIMESTAMP}")
    return timestamp


def _require_text(params: Dict[str, Any], name: str, required: bool) -> str:
    value = params.get(name, "")
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise RPCError(INVALID_PARAMS, f"{name} must be a string")
    if required and not value:
        raise RPCError(INVALID_PARAMS, f"Must specify a {name}")
    if any(c in value for c in _FORBIDDEN_CHARS):
        raise RPCError(INVALID_PARAMS, f"{name} must not contain tabs or newlines")
    return value


class RequestHandlers:
    """Maps RPC methods onto ChessClock operations."""

    def __init__(
        self,
        clock: ChessClock,
        on_event: Optional[Callable[[int], None]] = None,
    ):
        """Initialize handlers.

        Args:
            clock: Clock serving the requests
            on_event: Called with the timestamp of every recorded event
        """
        self.clock = clock
        self.on_event = on_event

    def register(self, server: IPCServer) -> None:
        """Register every clock method on an IPC server."""
        server.register_handler("ping", self.ping)
        server.register_handler("version", self.version)
        server.register_handler("start", self.start)
        server.register_handler("stop", self.stop)
        server.register_handler("schedule", self.schedule)
        server.register_handler("tally", self.tally)
        server.register_handler("list_time_sheets", self.list_time_sheets)
        server.register_handler("list_tags", self.list_tags)

    def ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"pong": True}

    def version(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"version": __version__}

    def start(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Start a task. Params: timestamp, tag, description (optional)."""
        timestamp = _require_event_time(params)
        tag = _require_text(params, "tag", required=True)
        description = _require_text(params, "description", required=False)

        with self._core_errors():
            event = self.clock.record_start(timestamp, tag, description)
        self._notify(timestamp)
        return {"tag": event.tag, "timestamp": event.start_time}

    def stop(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Stop the current task. Params: timestamp, reason (default ENDOFDAY)."""
        timestamp = _require_event_time(params)
        try:
            reason = StopReason.parse(params.get("reason", StopReason.ENDOFDAY.label))
        except ValueError as e:
            raise RPCError(INVALID_PARAMS, str(e))

        with self._core_errors():
            event = self.clock.record_stop(timestamp, reason)
        self._notify(timestamp)
        return {"reason": event.reason.label, "timestamp": event.stop_time}

    def schedule(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Schedule of a day. Params: date (any timestamp within the day)."""
        date = self._require_date(params)
        with self._core_errors():
            entries = self.clock.get_schedule(date)
        return {"tasks": [entry.to_dict() for entry in entries]}

    def tally(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Per-tag totals of a day. Params: date."""
        date = self._require_date(params)
        with self._core_errors():
            entries = self.clock.get_tally(date)
        return {"tasks": [entry.to_dict() for entry in entries.values()]}

    def list_time_sheets(self, params: Dict[str, Any]) -> Dict[str, Any]:
        with self._core_errors():
            return {"dates": self.clock.list_known_days()}

    def list_tags(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Tags used on a day. Params: date."""
        date = self._require_date(params)
        with self._core_errors():
            found = self.clock.get_tags(date)
        return {"tags": sorted(found)}

    @staticmethod
    def _require_date(params: Dict[str, Any]) -> int:
        return _require_timestamp(params, "date", "Must specify a date for the timesheet")

    def _notify(self, timestamp: int) -> None:
        if self.on_event is not None:
            self.on_event(timestamp)

    @staticmethod
    @contextmanager
    def _core_errors() -> Iterator[None]:
        """Translate core errors into RPC errors."""
        try:
            yield
        except NotFoundError as e:
            raise RPCError(NOT_FOUND, str(e)) from e
        except (ChessClockError, OSError) as e:
            logger.error(f"Request failed: {e}")
            raise RPCError(INTERNAL_ERROR, str(e)) from e

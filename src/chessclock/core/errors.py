"""Errors raised by the event log and codec."""


class ChessClockError(Exception):
    """Base class for ChessClock core errors."""

    pass


class MalformedRecordError(ChessClockError):
    """A stored record has the wrong arity or an unparseable timestamp."""

    pass


class UnknownReasonError(ChessClockError):
    """A stop record names a reason outside the known enumeration."""

    pass


class UnknownRecordTypeError(ChessClockError):
    """A record's first field is neither START nor STOP."""

    pass


class NotFoundError(ChessClockError):
    """No log file exists for the requested day."""

    def __init__(self, day_key: int):
        self.day_key = day_key
        super().__init__(f"No time sheet for day {day_key}")


class InvalidFileNameError(ChessClockError):
    """A file in the log directory does not follow the YYYY_MM_DD.log convention."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid time sheet file name: {name}")

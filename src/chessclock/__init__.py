"""ChessClock - personal time-tracking daemon."""

__version__ = "0.1.0"

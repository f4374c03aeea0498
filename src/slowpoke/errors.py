"""Exceptions raised by slowpoke."""

from __future__ import annotations


class SlowpokeError(Exception):
    """Base class for slowpoke errors."""


class NoTestDataError(SlowpokeError):
    """Raised when a log produced no resolved test durations."""

    def __init__(self, message: str = "No test data found in the file.") -> None:
        super().__init__(message)

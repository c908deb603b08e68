"""
Errors raised by the chunk builder.
"""

from __future__ import annotations


class ChunkError(Exception):
    """Base class for chunk building errors."""


class MalformedTimestamp(ChunkError):
    """
    An event boundary could not be turned into a timezone-aware datetime.

    The normalizer catches this and drops the event instead of guessing a time.
    """

    def __init__(self, value, reason: str = "not a valid RFC3339 timestamp"):
        self.value = value
        self.reason = reason
        super().__init__(f"{value!r}: {reason}")


class UnorderedInput(ChunkError):
    """
    Events were not given in ascending start order.
    """

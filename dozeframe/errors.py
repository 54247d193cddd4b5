"""Exceptions raised by the slideshow engine

Only EmptyPlaylist and GateFailed are meant to reach the host; the others
are caught inside the engine and logged.
"""

from enum import Enum


class SlideshowError(Exception):
    """Base class for engine errors"""


class EmptyPlaylist(SlideshowError):
    """No photo matches the current filters"""

    def __init__(self, message: str = "playlist is empty"):
        super().__init__(message)


class GateReason(Enum):
    UNPLUGGED = "unplugged"
    BATTERY_LOW = "battery_low"


class GateFailed(SlideshowError):
    """The battery predicate denied starting or continuing playback"""

    def __init__(self, reason: GateReason, battery_level: int = 100):
        super().__init__(f"gate failed: {reason.value} (battery {battery_level}%)")
        self.reason = reason
        self.battery_level = battery_level


class DecodeError(SlideshowError):
    """A photo could not be decoded; a placeholder is shown instead"""


class TimestampLookupFailed(SlideshowError):
    """A modification/creation time could not be read for date ordering"""


class InvalidTransitionRequest(SlideshowError):
    """A transition was requested while another one is still in flight"""

"""
Reporting window for swchanges.

This module resolves the optional start/end bounds given on the command line
into an absolute, inclusive time window that every source filters against.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

logger = logging.getLogger("swchanges.window")

DEFAULT_LOOKBACK = timedelta(days=3)
HUMAN_FORMAT = "%Y-%m-%d %H:%M:%S %z"


class InvalidWindow(ValueError):
    """Raised when the window bounds are not valid timestamps or are reversed."""


@dataclass(frozen=True)
class Window:
    """An inclusive ``[start, end]`` window at whole-second resolution."""

    start_epoch: int
    end_epoch: int

    @property
    def start(self) -> datetime:
        return datetime.fromtimestamp(self.start_epoch, timezone.utc)

    @property
    def end(self) -> datetime:
        return datetime.fromtimestamp(self.end_epoch, timezone.utc)

    @property
    def duration(self) -> timedelta:
        return timedelta(seconds=self.end_epoch - self.start_epoch)

    @property
    def hours(self) -> int:
        """Whole hours covered by the window."""
        return (self.end_epoch - self.start_epoch) // 3600

    @property
    def start_human(self) -> str:
        return local_time(self.start_epoch).strftime(HUMAN_FORMAT)

    @property
    def end_human(self) -> str:
        return local_time(self.end_epoch).strftime(HUMAN_FORMAT)

    def contains(self, moment: Union[datetime, int, float]) -> bool:
        """
        Check whether a moment falls inside the window, bounds included.

        Args:
            moment: An aware datetime (naive values are taken as UTC) or
                epoch seconds. Fractions of a second are truncated.

        Returns:
            True if ``start <= moment <= end``
        """
        return self.start_epoch <= to_epoch(moment) <= self.end_epoch


def local_time(epoch: int) -> datetime:
    """Return *epoch* as an aware datetime in the local timezone."""
    return datetime.fromtimestamp(epoch, timezone.utc).astimezone()


def to_epoch(moment: Union[datetime, int, float]) -> int:
    """Convert a datetime or epoch value to whole epoch seconds."""
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return int(moment.timestamp())
    return int(moment)


def _validate(value: Union[int, str], name: str) -> int:
    if isinstance(value, bool):
        raise InvalidWindow(f"{name} must be epoch seconds, got: {value}")
    if isinstance(value, str):
        if not value.isdigit():
            raise InvalidWindow(f"{name} must be epoch seconds, got: {value}")
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise InvalidWindow(f"{name} must be epoch seconds, got: {value}")
    try:
        datetime.fromtimestamp(value, timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise InvalidWindow(f"{name} is out of range: {value}") from e
    return value


def resolve_window(
    start: Optional[Union[int, str]] = None,
    end: Optional[Union[int, str]] = None,
    now: Optional[int] = None,
    lookback: timedelta = DEFAULT_LOOKBACK,
) -> Window:
    """
    Resolve optional bounds into a concrete window.

    Both absent gives ``[now - lookback, now]``; only *end* gives
    ``[end - lookback, end]``; only *start* gives ``[start, now]``.

    Args:
        start: Window start in epoch seconds, or None
        end: Window end in epoch seconds, or None
        now: Current time in epoch seconds; read from the clock if None
        lookback: Window length used when *start* is missing

    Returns:
        The resolved Window

    Raises:
        InvalidWindow: If a bound is not a valid timestamp, the derived start
            is negative, or end < start
    """
    start_epoch = None if start is None else _validate(start, "START")
    end_epoch = None if end is None else _validate(end, "END")

    if end_epoch is None:
        end_epoch = int(time.time()) if now is None else now
    if start_epoch is None:
        start_epoch = end_epoch - int(lookback.total_seconds())
        if start_epoch < 0:
            raise InvalidWindow(
                f"START derived from END ({end_epoch}) is before the epoch: "
                f"{start_epoch}"
            )

    if end_epoch < start_epoch:
        raise InvalidWindow(
            f"END ({end_epoch}) is earlier than START ({start_epoch})."
        )

    logger.debug(f"Resolved window: {start_epoch} .. {end_epoch}")
    return Window(start_epoch=start_epoch, end_epoch=end_epoch)

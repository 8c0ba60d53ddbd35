"""
Source package for swchanges.

This module provides the event model and the base class for report sources.
Each source reads one external data store (install history, receipts,
Homebrew, launchd, applications, unified log) and returns the changes that
fall inside a window.
"""

import abc
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from swchanges_py.window import Window

LOCAL_ISO_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


@dataclass(frozen=True)
class ChangeEvent:
    """A single software change observed by a source."""

    timestamp: datetime
    source: str
    label: str

    def local_iso(self) -> str:
        """Timestamp in local time with a numeric UTC offset."""
        return self.timestamp.astimezone().strftime(LOCAL_ISO_FORMAT)

    def utc_iso(self) -> str:
        return self.timestamp.astimezone(timezone.utc).isoformat(timespec="seconds")


@dataclass
class SourceResult:
    """
    Outcome of querying one source.

    A result is populated, empty, or empty with diagnostic notes; a source
    never raises its own failure into the pipeline.
    """

    events: List[ChangeEvent] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @classmethod
    def failed(cls, note: str) -> "SourceResult":
        """Build an empty result carrying a single diagnostic line."""
        return cls(events=[], notes=[note])


class BaseSource(abc.ABC):
    """Base class for report sources."""

    #: Short identifier carried on every event the source emits.
    name: str = ""

    #: Section heading used by the report emitter.
    title: str = ""

    #: Whether the section is a non-authoritative supplement.
    best_effort: bool = False

    def available(self) -> bool:
        """
        Whether this source applies to the current machine at all.

        An unavailable source is left out of the report entirely, with no
        section heading.
        """
        return True

    @abc.abstractmethod
    def collect(self, window: Window) -> SourceResult:
        """
        Gather the events inside *window*.

        Args:
            window: The resolved reporting window

        Returns:
            SourceResult whose events all fall within the window
        """
        pass

    def format_event(self, event: ChangeEvent) -> str:
        """Render one event as a report line."""
        return f"{event.local_iso()}  {event.label}"

    def event(self, timestamp: datetime, label: str) -> ChangeEvent:
        """Build an event attributed to this source."""
        return ChangeEvent(timestamp=timestamp, source=self.name, label=label)

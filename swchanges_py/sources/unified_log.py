"""
Unified log query.

Asks ``log show`` for software-update and App Store messages inside the
window. The unified log rotates, so older windows come back partial or
empty; this source supplements the others and is never authoritative.
"""

import logging
import re
from datetime import datetime
from typing import List, Optional, Sequence

from swchanges_py.platform import (
    DEFAULT_LOG_KEYWORDS,
    DEFAULT_LOG_PROCESSES,
    SOFTWARE_UPDATE_SUBSYSTEM,
)
from swchanges_py.sources import BaseSource, ChangeEvent, SourceResult
from swchanges_py.sources.command import CommandError, run_command
from swchanges_py.window import Window

logger = logging.getLogger("swchanges.sources.unified_log")

# Compact style lines start with a local "YYYY-MM-DD HH:MM:SS.ffffff" stamp
LINE_TIMESTAMP = re.compile(r"^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})(?:\.\d+)?\b")


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_predicate(
    processes: Sequence[str] = DEFAULT_LOG_PROCESSES,
    keywords: Sequence[str] = DEFAULT_LOG_KEYWORDS,
    subsystem: str = SOFTWARE_UPDATE_SUBSYSTEM,
) -> str:
    """Build the ``log show`` predicate for update-related messages."""
    origins = [f"subsystem == {_quote(subsystem)}"]
    origins += [f"process == {_quote(p)}" for p in processes]
    matches = [f"eventMessage CONTAINS[c] {_quote(k)}" for k in keywords]
    if not matches:
        return "(" + " || ".join(origins) + ")"
    return "(" + " || ".join(origins) + ") && (" + " || ".join(matches) + ")"


def parse_line_timestamp(line: str) -> Optional[datetime]:
    """Return the local timestamp leading a compact log line, if any."""
    match = LINE_TIMESTAMP.match(line)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), "%Y-%m-%d %H:%M:%S").astimezone()
    except ValueError:
        return None


class UnifiedLogSource(BaseSource):
    """Best-effort messages from the system unified log."""

    name = "unified-log"
    title = "Unified log (softwareupdate/appstoreagent)"
    best_effort = True

    def __init__(
        self,
        processes: Sequence[str] = DEFAULT_LOG_PROCESSES,
        keywords: Sequence[str] = DEFAULT_LOG_KEYWORDS,
        binary: str = "log",
        timeout: Optional[float] = None,
    ):
        self.predicate = build_predicate(processes, keywords)
        self.binary = binary
        self.timeout = timeout

    def command(self, window: Window) -> List[str]:
        return [
            self.binary,
            "show",
            "--style",
            "compact",
            "--start",
            window.start_human,
            "--end",
            window.end_human,
            "--info",
            "--debug",
            "--predicate",
            self.predicate,
        ]

    def collect(self, window: Window) -> SourceResult:
        try:
            # log show exits non-zero on some partial reads; keep what it printed
            output = run_command(
                self.command(window), timeout=self.timeout, check=False
            )
        except CommandError as e:
            logger.warning(f"Unified log query failed: {e}")
            return SourceResult.failed(f"(unified log query failed: {e})")

        events: List[ChangeEvent] = []
        for line in output.splitlines():
            timestamp = parse_line_timestamp(line)
            if timestamp is None or not window.contains(timestamp):
                continue
            events.append(self.event(timestamp, line.rstrip()))
        return SourceResult(events=events)

    def format_event(self, event: ChangeEvent) -> str:
        return event.label

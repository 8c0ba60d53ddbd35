"""
Installer history reader.

Reads the plist record store the Installer, App Store and macOS updates
append to, and reports the records that fall inside the window.
"""

import logging
import plistlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List
from xml.parsers.expat import ExpatError

from swchanges_py.platform import INSTALL_HISTORY_PATH
from swchanges_py.sources import BaseSource, ChangeEvent, SourceResult
from swchanges_py.window import Window

logger = logging.getLogger("swchanges.sources.install_history")


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _package_ids(value: Any) -> List[str]:
    if not isinstance(value, list):
        if value is not None:
            logger.debug(f"Ignoring packageIdentifiers: {value!r}")
        return []
    return [str(v) for v in value]


class InstallHistorySource(BaseSource):
    """Records from ``InstallHistory.plist``, oldest first."""

    name = "install-history"
    title = "Install history (Installer + App Store + macOS)"

    def __init__(self, path: Path = INSTALL_HISTORY_PATH):
        self.path = path

    def _load(self) -> List[Dict[str, Any]]:
        with open(self.path, "rb") as f:
            items = plistlib.load(f)
        if not isinstance(items, list):
            raise ValueError("expected an array of install records")
        return items

    def collect(self, window: Window) -> SourceResult:
        try:
            items = self._load()
        except (OSError, ValueError, ExpatError) as e:
            logger.warning(f"Could not read install history at {self.path}: {e}")
            return SourceResult.failed(f"(could not read {self.path}: {e})")

        events: List[ChangeEvent] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            dt = item.get("date")
            if not isinstance(dt, datetime):
                continue
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            if not window.contains(dt):
                continue

            name = _text(item.get("displayName"))
            ver = _text(item.get("displayVersion"))
            proc = _text(item.get("processName"))
            pkgs = ", ".join(_package_ids(item.get("packageIdentifiers")))
            events.append(self.event(dt, f"[{proc}]  {name} {ver}  {pkgs}"))

        events.sort(key=lambda e: e.timestamp)
        logger.debug(f"{len(events)} install history records in window")
        return SourceResult(events=events)

    def format_event(self, event: ChangeEvent) -> str:
        return f"{event.utc_iso()}  {event.label}"

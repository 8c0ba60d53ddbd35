"""
Application bundle scanner.

Only a bundle's own top-level modification time is checked. Copies or moves
that preserve it go unnoticed, and changes deep inside a bundle are not
tracked.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from swchanges_py.platform import default_application_dirs
from swchanges_py.sources import BaseSource, ChangeEvent, SourceResult
from swchanges_py.sources.files import iter_modified_children
from swchanges_py.window import Window

logger = logging.getLogger("swchanges.sources.applications")

BUNDLE_SUFFIX = ".app"


class ApplicationsSource(BaseSource):
    """Top-level ``.app`` bundles touched inside the window."""

    name = "applications"
    title = "Application bundles touched"

    def __init__(self, directories: Optional[List[Path]] = None):
        self.directories = (
            directories if directories is not None else default_application_dirs()
        )

    def collect(self, window: Window) -> SourceResult:
        events: List[ChangeEvent] = []
        for directory in self.directories:
            for path, modified in iter_modified_children(
                directory, window, lambda entry: entry.name.endswith(BUNDLE_SUFFIX)
            ):
                timestamp = datetime.fromtimestamp(modified, timezone.utc)
                events.append(self.event(timestamp, str(path)))
        logger.debug(f"{len(events)} application bundles touched in window")
        return SourceResult(events=events)

    def format_event(self, event: ChangeEvent) -> str:
        return event.label

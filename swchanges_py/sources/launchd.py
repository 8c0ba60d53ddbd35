"""
Auto-start configuration scanner.

Lists LaunchAgents and LaunchDaemons property lists modified inside the
window. System directories may need elevated privileges to list in full;
without them the listing is partial.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from swchanges_py.platform import default_launchd_dirs
from swchanges_py.sources import BaseSource, ChangeEvent, SourceResult
from swchanges_py.sources.files import iter_modified_children
from swchanges_py.window import Window


class LaunchdSource(BaseSource):
    """Regular files directly inside the auto-start directories."""

    name = "launchd"
    title = "LaunchAgents/Daemons changed"

    def __init__(self, directories: Optional[List[Path]] = None):
        self.directories = (
            directories if directories is not None else default_launchd_dirs()
        )

    def collect(self, window: Window) -> SourceResult:
        events: List[ChangeEvent] = []
        for directory in self.directories:
            for path, modified in iter_modified_children(
                directory, window, lambda entry: entry.is_file(follow_symlinks=False)
            ):
                timestamp = datetime.fromtimestamp(modified, timezone.utc)
                events.append(self.event(timestamp, str(path)))
        return SourceResult(events=events)

    def format_event(self, event: ChangeEvent) -> str:
        return event.label

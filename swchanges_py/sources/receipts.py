"""
Package receipt scanner.

Asks ``pkgutil`` for every installed package identifier and reports those
whose recorded install time falls inside the window.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from swchanges_py.sources import BaseSource, ChangeEvent, SourceResult
from swchanges_py.sources.command import CommandError, run_command
from swchanges_py.window import Window

logger = logging.getLogger("swchanges.sources.receipts")


def parse_install_time(pkg_info: str) -> Optional[int]:
    """Extract the ``install-time`` epoch from ``pkgutil --pkg-info`` output."""
    for line in pkg_info.splitlines():
        key, sep, value = line.partition(": ")
        if sep and key.strip() == "install-time":
            value = value.strip()
            return int(value) if value.isdigit() else None
    return None


class ReceiptsSource(BaseSource):
    """Install times recorded in the package receipt database."""

    name = "receipts"
    title = "pkgutil receipts (extra signal)"

    def __init__(self, binary: str = "pkgutil", timeout: Optional[float] = None):
        self.binary = binary
        self.timeout = timeout

    def package_ids(self) -> List[str]:
        output = run_command([self.binary, "--pkgs"], timeout=self.timeout)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def install_time(self, package_id: str) -> Optional[int]:
        """Return the install time of *package_id*, or None if unknown."""
        try:
            output = run_command(
                [self.binary, "--pkg-info", package_id], timeout=self.timeout
            )
        except CommandError as e:
            logger.debug(f"Skipping receipt {package_id}: {e}")
            return None
        return parse_install_time(output)

    def collect(self, window: Window) -> SourceResult:
        try:
            package_ids = self.package_ids()
        except CommandError as e:
            logger.warning(f"Could not list package receipts: {e}")
            return SourceResult.failed(f"(could not list package receipts: {e})")

        events: List[ChangeEvent] = []
        for package_id in package_ids:
            installed = self.install_time(package_id)
            if installed is None or not window.contains(installed):
                continue
            timestamp = datetime.fromtimestamp(installed, timezone.utc)
            events.append(self.event(timestamp, package_id))

        logger.debug(f"{len(events)} of {len(package_ids)} receipts in window")
        return SourceResult(events=events)

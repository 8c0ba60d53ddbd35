"""
Homebrew scanners.

Homebrew keeps no queryable install log, so the modification time of each
installed keg (formulae) or versioned cask directory stands in for the
install time. Reinstalling into an existing path may leave that time
unchanged; this is an approximation, not an audit trail.
"""

import abc
import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from swchanges_py.sources import BaseSource, ChangeEvent, SourceResult
from swchanges_py.sources.command import CommandError, run_command
from swchanges_py.sources.files import mtime
from swchanges_py.window import Window

logger = logging.getLogger("swchanges.sources.homebrew")

INSTALL_RECEIPT = "INSTALL_RECEIPT.json"


class Homebrew:
    """Locates the Homebrew installation through the ``brew`` binary."""

    def __init__(self, binary: str = "brew", timeout: Optional[float] = None):
        self.binary = binary
        self.timeout = timeout
        self._prefix: Optional[Path] = None
        self._cellar: Optional[Path] = None

    def installed(self) -> bool:
        """Return True when the ``brew`` binary is on the PATH."""
        return shutil.which(self.binary) is not None

    def _command(self, args: List[str]) -> List[str]:
        # brew refuses to run as root; drop back to the invoking user under sudo
        sudo_user = os.environ.get("SUDO_USER")
        if hasattr(os, "geteuid") and os.geteuid() == 0 and sudo_user:
            logger.debug(f"Running as root, running brew as {sudo_user}")
            return ["sudo", "-u", sudo_user, self.binary] + args
        return [self.binary] + args

    def _query(self, flag: str) -> Path:
        output = run_command(self._command([flag]), timeout=self.timeout)
        return Path(output.strip())

    @property
    def prefix(self) -> Path:
        if self._prefix is None:
            self._prefix = self._query("--prefix")
        return self._prefix

    @property
    def cellar(self) -> Path:
        if self._cellar is None:
            self._cellar = self._query("--cellar")
        return self._cellar

    @property
    def caskroom(self) -> Path:
        return self.prefix / "Caskroom"


def iter_formula_kegs(cellar: Path) -> Iterator[Tuple[str, str, Path]]:
    """Yield ``(name, version, receipt)`` for each keg with an install receipt."""
    for receipt in sorted(cellar.glob(f"*/*/{INSTALL_RECEIPT}")):
        if receipt.is_file():
            yield receipt.parent.parent.name, receipt.parent.name, receipt


def iter_cask_versions(caskroom: Path) -> Iterator[Tuple[str, str, Path]]:
    """Yield ``(name, version, directory)`` for each versioned cask directory."""
    for version_dir in sorted(caskroom.glob("*/*")):
        if version_dir.is_dir():
            yield version_dir.parent.name, version_dir.name, version_dir


class _HomebrewSource(BaseSource):
    def __init__(self, brew: Homebrew):
        self.brew = brew

    def available(self) -> bool:
        return self.brew.installed()

    @abc.abstractmethod
    def entries(self) -> Iterator[Tuple[str, str, Path]]:
        """Yield ``(name, version, path)`` for each installed item."""
        pass

    def collect(self, window: Window) -> SourceResult:
        try:
            entries = list(self.entries())
        except CommandError as e:
            logger.warning(f"Could not locate Homebrew: {e}")
            return SourceResult.failed(f"(could not locate Homebrew: {e})")

        events: List[ChangeEvent] = []
        for name, version, path in entries:
            modified = mtime(path)
            if modified is None or not window.contains(modified):
                continue
            timestamp = datetime.fromtimestamp(modified, timezone.utc)
            events.append(self.event(timestamp, f"{name} {version}"))

        events.sort(key=lambda e: e.timestamp)
        return SourceResult(events=events)


class HomebrewFormulaeSource(_HomebrewSource):
    """Formula kegs whose install receipt changed inside the window."""

    name = "homebrew-formulae"
    title = "Homebrew formulae"

    def entries(self) -> Iterator[Tuple[str, str, Path]]:
        cellar = self.brew.cellar
        if not cellar.is_dir():
            return iter(())
        return iter_formula_kegs(cellar)


class HomebrewCasksSource(_HomebrewSource):
    """Versioned cask directories changed inside the window."""

    name = "homebrew-casks"
    title = "Homebrew casks"

    def entries(self) -> Iterator[Tuple[str, str, Path]]:
        caskroom = self.brew.caskroom
        if not caskroom.is_dir():
            return iter(())
        return iter_cask_versions(caskroom)

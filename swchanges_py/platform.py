"""
Platform defaults for swchanges.

Centralizes the fixed macOS locations the sources read, so the rest of the
codebase can ask for them instead of scattering literal paths.
"""

import sys
from pathlib import Path
from typing import List

INSTALL_HISTORY_PATH = Path("/Library/Receipts/InstallHistory.plist")

SYSTEM_LAUNCHD_DIRS = [Path("/Library/LaunchAgents"), Path("/Library/LaunchDaemons")]

SYSTEM_APPLICATIONS_DIR = Path("/Applications")

SOFTWARE_UPDATE_SUBSYSTEM = "com.apple.SoftwareUpdate"

DEFAULT_LOG_PROCESSES = ["softwareupdated", "appstoreagent", "App Store"]

DEFAULT_LOG_KEYWORDS = ["Install", "update", "download"]


def is_macos() -> bool:
    """Return True when running on macOS."""
    return sys.platform == "darwin"


def default_launchd_dirs() -> List[Path]:
    """Return the system and per-user auto-start directories."""
    return SYSTEM_LAUNCHD_DIRS + [Path.home() / "Library" / "LaunchAgents"]


def default_application_dirs() -> List[Path]:
    """Return the system and per-user application directories."""
    return [SYSTEM_APPLICATIONS_DIR, Path.home() / "Applications"]

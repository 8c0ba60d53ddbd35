"""
Filesystem helpers for sources that use modification times as evidence.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple

from swchanges_py.window import Window

logger = logging.getLogger("swchanges.sources.files")


def mtime(path: Path) -> Optional[int]:
    """Return the whole-second modification time of *path*, or None."""
    try:
        return int(path.stat().st_mtime)
    except OSError as e:
        logger.debug(f"Cannot stat {path}: {e}")
        return None


def iter_modified_children(
    directory: Path,
    window: Window,
    match: Callable[[os.DirEntry], bool],
) -> Iterator[Tuple[Path, int]]:
    """
    Yield direct children of *directory* modified inside *window*.

    Unreadable directories and entries are skipped, so a directory that needs
    elevated privileges yields a partial or empty listing instead of failing.

    Args:
        directory: Directory whose immediate children are listed
        window: The reporting window
        match: Predicate selecting which entries to consider

    Yields:
        Tuples of (path, modification epoch), in name order
    """
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except FileNotFoundError:
        return
    except OSError as e:
        logger.debug(f"Cannot list {directory}: {e}")
        return

    for entry in entries:
        try:
            if not match(entry):
                continue
            modified = int(entry.stat(follow_symlinks=False).st_mtime)
        except OSError as e:
            logger.debug(f"Cannot stat {entry.path}: {e}")
            continue
        if window.contains(modified):
            yield Path(entry.path), modified

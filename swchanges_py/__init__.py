"""
swchanges - report software additions and changes on macOS within a time window.

Read-only: install history, receipts, Homebrew, launchd, apps, unified log.
"""

from importlib.metadata import version as _version

__version__ = _version("swchanges")

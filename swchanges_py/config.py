"""
Configuration file support for swchanges.

Loads settings from ``~/.config/swchanges/config.yaml`` (or
``$XDG_CONFIG_HOME/swchanges/config.yaml``) and exposes them as a typed
dataclass that the CLI can merge with command-line flags.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from swchanges_py.platform import (
    DEFAULT_LOG_KEYWORDS,
    DEFAULT_LOG_PROCESSES,
    INSTALL_HISTORY_PATH,
    default_application_dirs,
    default_launchd_dirs,
)

logger = logging.getLogger("swchanges.config")

DEFAULT_LOOKBACK_DAYS = 3
DEFAULT_COMMAND_TIMEOUT = 300.0


def default_config_path() -> Path:
    """Return the default configuration file path.

    Uses ``$XDG_CONFIG_HOME/swchanges/config.yaml`` when set, otherwise
    falls back to ``~/.config/swchanges/config.yaml``.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "swchanges" / "config.yaml"
    return Path.home() / ".config" / "swchanges" / "config.yaml"


def _path_list(data: Dict[str, Any], key: str) -> Optional[List[Path]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        logger.warning("Ignoring %s: expected a list of paths, got %r", key, value)
        return None
    return [Path(v).expanduser() for v in value]


def _str_list(data: Dict[str, Any], key: str) -> Optional[List[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        logger.warning(
            "Ignoring %s: expected a list of strings, got %r", key, value
        )
        return None
    return list(value)


def _number(data: Dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        logger.warning(
            "Ignoring %s: expected a non-negative number, got %r", key, value
        )
        return None
    return float(value)


@dataclass
class SwchangesConfig:
    """Top-level configuration loaded from the YAML file."""

    lookback_days: float = DEFAULT_LOOKBACK_DAYS
    install_history: Path = INSTALL_HISTORY_PATH
    launchd_dirs: List[Path] = field(default_factory=default_launchd_dirs)
    application_dirs: List[Path] = field(default_factory=default_application_dirs)
    brew_binary: str = "brew"
    log_processes: List[str] = field(
        default_factory=lambda: list(DEFAULT_LOG_PROCESSES)
    )
    log_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_LOG_KEYWORDS))
    command_timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT

    @property
    def lookback(self) -> timedelta:
        return timedelta(days=self.lookback_days)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SwchangesConfig":
        """Construct a ``SwchangesConfig`` from a parsed YAML dictionary."""
        cfg = cls()
        if not isinstance(data, dict):
            return cfg

        lookback_days = _number(data, "lookback_days")
        if lookback_days is not None:
            cfg.lookback_days = lookback_days

        install_history = data.get("install_history")
        if isinstance(install_history, str):
            cfg.install_history = Path(install_history).expanduser()
        elif install_history is not None:
            logger.warning(
                "Ignoring install_history: expected a path, got %r", install_history
            )

        launchd_dirs = _path_list(data, "launchd_dirs")
        if launchd_dirs is not None:
            cfg.launchd_dirs = launchd_dirs

        application_dirs = _path_list(data, "application_dirs")
        if application_dirs is not None:
            cfg.application_dirs = application_dirs

        brew_binary = data.get("brew_binary")
        if isinstance(brew_binary, str) and brew_binary:
            cfg.brew_binary = brew_binary
        elif brew_binary is not None:
            logger.warning(
                "Ignoring brew_binary: expected a string, got %r", brew_binary
            )

        log_processes = _str_list(data, "log_processes")
        if log_processes is not None:
            cfg.log_processes = log_processes

        log_keywords = _str_list(data, "log_keywords")
        if log_keywords is not None:
            cfg.log_keywords = log_keywords

        # An explicit null or 0 disables the timeout
        if "command_timeout" in data:
            if data["command_timeout"] is None:
                cfg.command_timeout = None
            else:
                timeout = _number(data, "command_timeout")
                if timeout is not None:
                    cfg.command_timeout = timeout or None

        return cfg

    @classmethod
    def from_file(cls, path: Path) -> "SwchangesConfig":
        """Read a YAML file and return a ``SwchangesConfig``.

        Returns the default config on any error.
        """
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f.read())
            if data is None:
                return cls()
            return cls.from_dict(data)
        except (IOError, yaml.YAMLError) as e:
            logger.error("Failed to load config from %s: %s", path, e)
            return cls()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "SwchangesConfig":
        """Main entry point: load config from *config_path* or the default location.

        Returns the default config if the file does not exist.
        """
        path = config_path or default_config_path()
        if not path.exists():
            return cls()
        return cls.from_file(path)

"""
Tests for the config module.
"""

import os
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

from swchanges_py.config import (
    DEFAULT_COMMAND_TIMEOUT,
    SwchangesConfig,
    default_config_path,
)
from swchanges_py.platform import (
    DEFAULT_LOG_KEYWORDS,
    DEFAULT_LOG_PROCESSES,
    INSTALL_HISTORY_PATH,
)


def test_default_config_path() -> None:
    """default_config_path falls back to ~/.config/swchanges/config.yaml."""
    env = {"HOME": str(Path.home())}
    with patch.dict(os.environ, env, clear=True):
        result = default_config_path()
        assert result == Path.home() / ".config" / "swchanges" / "config.yaml"


def test_default_config_path_xdg() -> None:
    """default_config_path respects $XDG_CONFIG_HOME."""
    with patch.dict(os.environ, {"XDG_CONFIG_HOME": "/custom/config"}):
        result = default_config_path()
        assert result == Path("/custom/config/swchanges/config.yaml")


def test_missing_file_returns_defaults(tmp_path: Path) -> None:
    """Loading a non-existent file returns the default config."""
    cfg = SwchangesConfig.load(tmp_path / "nonexistent.yaml")
    assert cfg.lookback == timedelta(days=3)
    assert cfg.install_history == INSTALL_HISTORY_PATH
    assert cfg.launchd_dirs == [
        Path("/Library/LaunchAgents"),
        Path("/Library/LaunchDaemons"),
        Path.home() / "Library" / "LaunchAgents",
    ]
    assert cfg.application_dirs == [
        Path("/Applications"),
        Path.home() / "Applications",
    ]
    assert cfg.brew_binary == "brew"
    assert cfg.log_processes == DEFAULT_LOG_PROCESSES
    assert cfg.log_keywords == DEFAULT_LOG_KEYWORDS
    assert cfg.command_timeout == DEFAULT_COMMAND_TIMEOUT


def test_empty_file_returns_defaults(tmp_path: Path) -> None:
    """An empty YAML file returns the default config."""
    p = tmp_path / "config.yaml"
    p.write_text("")
    cfg = SwchangesConfig.from_file(p)
    assert cfg == SwchangesConfig()


def test_full_config_parsing(tmp_path: Path) -> None:
    """A fully-populated config file is parsed correctly."""
    p = tmp_path / "config.yaml"
    p.write_text("""\
lookback_days: 7
install_history: "~/InstallHistory.plist"
launchd_dirs:
  - "/Library/LaunchDaemons"
  - "~/Library/LaunchAgents"
application_dirs:
  - "/Applications"
brew_binary: "/opt/homebrew/bin/brew"
log_processes:
  - "softwareupdated"
log_keywords:
  - "install"
command_timeout: 60
""")
    cfg = SwchangesConfig.from_file(p)
    assert cfg.lookback == timedelta(days=7)
    assert cfg.install_history == Path.home() / "InstallHistory.plist"
    assert cfg.launchd_dirs == [
        Path("/Library/LaunchDaemons"),
        Path.home() / "Library" / "LaunchAgents",
    ]
    assert cfg.application_dirs == [Path("/Applications")]
    assert cfg.brew_binary == "/opt/homebrew/bin/brew"
    assert cfg.log_processes == ["softwareupdated"]
    assert cfg.log_keywords == ["install"]
    assert cfg.command_timeout == 60.0


def test_timeout_can_be_disabled(tmp_path: Path) -> None:
    """A null or zero command_timeout disables the timeout."""
    p = tmp_path / "config.yaml"
    p.write_text("command_timeout: null\n")
    assert SwchangesConfig.from_file(p).command_timeout is None
    p.write_text("command_timeout: 0\n")
    assert SwchangesConfig.from_file(p).command_timeout is None


def test_invalid_values_fall_back_to_defaults(tmp_path: Path) -> None:
    """Values of the wrong type are ignored."""
    p = tmp_path / "config.yaml"
    p.write_text("""\
lookback_days: "three"
install_history: 42
launchd_dirs: "/Library/LaunchAgents"
application_dirs:
  - 1
  - 2
brew_binary: []
log_keywords: {"a": 1}
command_timeout: -5
""")
    cfg = SwchangesConfig.from_file(p)
    assert cfg == SwchangesConfig()


def test_invalid_yaml_returns_defaults(tmp_path: Path) -> None:
    """Malformed YAML returns the default config instead of raising."""
    p = tmp_path / "config.yaml"
    p.write_text(": : : [invalid yaml")
    cfg = SwchangesConfig.from_file(p)
    assert cfg == SwchangesConfig()


def test_from_dict_non_dict() -> None:
    """from_dict with a non-dict value returns defaults."""
    cfg = SwchangesConfig.from_dict("not a dict")  # type: ignore[arg-type]
    assert cfg == SwchangesConfig()


def test_load_uses_default_path(tmp_path: Path) -> None:
    """load() without arguments uses default_config_path()."""
    with patch(
        "swchanges_py.config.default_config_path", return_value=tmp_path / "nope.yaml"
    ):
        cfg = SwchangesConfig.load()
    assert cfg == SwchangesConfig()

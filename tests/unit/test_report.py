"""
Tests for report assembly.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from swchanges_py.config import SwchangesConfig
from swchanges_py.report import (
    build_sources,
    collect_sections,
    overview_line,
    query_source,
    report_document,
    section_header,
    write_json_report,
    write_text_report,
)
from swchanges_py.sources import BaseSource, ChangeEvent, SourceResult
from swchanges_py.sources.applications import ApplicationsSource
from swchanges_py.sources.command import CommandError
from swchanges_py.sources.homebrew import HomebrewCasksSource, HomebrewFormulaeSource
from swchanges_py.sources.install_history import InstallHistorySource
from swchanges_py.sources.launchd import LaunchdSource
from swchanges_py.sources.receipts import ReceiptsSource
from swchanges_py.sources.unified_log import UnifiedLogSource
from swchanges_py.window import Window

START = 1_704_067_200
END = START + 3 * 24 * 3600
WINDOW = Window(start_epoch=START, end_epoch=END)


def _at(epoch: int) -> datetime:
    return datetime.fromtimestamp(epoch, timezone.utc)


class FakeSource(BaseSource):
    """A source returning canned events."""

    def __init__(
        self,
        name: str,
        epochs: Optional[List[int]] = None,
        notes: Optional[List[str]] = None,
        available: bool = True,
        error: Optional[Exception] = None,
        best_effort: bool = False,
    ):
        self.name = name
        self.title = f"Fake {name}"
        self.epochs = epochs or []
        self.notes = notes or []
        self._available = available
        self.error = error
        self.best_effort = best_effort
        self.windows: List[Window] = []

    def available(self) -> bool:
        return self._available

    def collect(self, window: Window) -> SourceResult:
        self.windows.append(window)
        if self.error is not None:
            raise self.error
        events = [self.event(_at(e), f"{self.name}-{e}") for e in self.epochs]
        return SourceResult(events=events, notes=list(self.notes))

    def format_event(self, event: ChangeEvent) -> str:
        return event.label


def _text(window: Window, sources: List[BaseSource]) -> List[str]:
    lines: List[str] = []
    write_text_report(window, sources, lines.append)
    return lines


def test_build_sources_order() -> None:
    sources = build_sources(SwchangesConfig())
    assert [type(s) for s in sources] == [
        InstallHistorySource,
        ReceiptsSource,
        HomebrewFormulaeSource,
        HomebrewCasksSource,
        LaunchdSource,
        ApplicationsSource,
        UnifiedLogSource,
    ]


def test_build_sources_uses_config(tmp_path: Path) -> None:
    cfg = SwchangesConfig(
        install_history=tmp_path / "history.plist",
        launchd_dirs=[tmp_path / "agents"],
        application_dirs=[tmp_path / "apps"],
        brew_binary="mybrew",
        command_timeout=7,
    )
    history, receipts, formulae, casks, launchd, apps, log = build_sources(cfg)
    assert history.path == tmp_path / "history.plist"
    assert receipts.timeout == 7
    assert formulae.brew is casks.brew
    assert formulae.brew.binary == "mybrew"
    assert launchd.directories == [tmp_path / "agents"]
    assert apps.directories == [tmp_path / "apps"]
    assert log.timeout == 7


def test_overview_line() -> None:
    assert overview_line(WINDOW) == (
        f"## macOS software changes between {WINDOW.start_human} and "
        f"{WINDOW.end_human} (~72h)"
    )


def test_section_header() -> None:
    source = FakeSource("a")
    assert section_header(source, WINDOW) == (
        f"### Fake a — {WINDOW.start_human} → {WINDOW.end_human}"
    )
    source.best_effort = True
    assert section_header(source, WINDOW).endswith(" (best-effort)")


def test_text_report_layout() -> None:
    lines = _text(
        WINDOW,
        [FakeSource("a", [START + 1]), FakeSource("b", [], notes=["(nothing)"])],
    )
    assert lines == [
        overview_line(WINDOW),
        "",
        section_header(FakeSource("a"), WINDOW),
        "",
        f"a-{START + 1}",
        "",
        section_header(FakeSource("b"), WINDOW),
        "",
        "(nothing)",
    ]


def test_sections_follow_source_order() -> None:
    lines = _text(WINDOW, [FakeSource(n) for n in ["c", "a", "b"]])
    headers = [line for line in lines if line.startswith("###")]
    assert [h.split()[2] for h in headers] == ["c", "a", "b"]


def test_unavailable_source_has_no_section() -> None:
    absent = FakeSource("brew", [START], available=False)
    lines = _text(WINDOW, [FakeSource("a"), absent, FakeSource("b")])
    assert not any("Fake brew" in line for line in lines)
    assert absent.windows == []


def test_events_outside_window_are_dropped() -> None:
    source = FakeSource("a", [START - 1, START, END, END + 1])
    result = query_source(source, WINDOW)
    assert [e.label for e in result.events] == [f"a-{START}", f"a-{END}"]


def test_failing_source_does_not_stop_report() -> None:
    broken = FakeSource("broken", error=PermissionError("Operation not permitted"))
    tool = FakeSource("tool", error=CommandError("`log` timed out"))
    lines = _text(WINDOW, [broken, tool, FakeSource("after", [START])])
    assert "(broken failed: Operation not permitted)" in lines
    assert "(tool failed: `log` timed out)" in lines
    assert lines[-1] == f"after-{START}"


def test_unexpected_source_error_does_not_stop_report() -> None:
    broken = FakeSource("broken", error=TypeError("expected str instance"))
    lines = _text(WINDOW, [broken, FakeSource("after", [START])])
    assert "(broken failed: expected str instance)" in lines
    assert lines[-1] == f"after-{START}"


def test_every_source_gets_the_same_window() -> None:
    sources = [FakeSource("a"), FakeSource("b")]
    list(collect_sections(WINDOW, sources))
    assert [s.windows for s in sources] == [[WINDOW], [WINDOW]]


def test_report_document() -> None:
    document = report_document(
        WINDOW,
        [
            FakeSource("a", [START], notes=["(note)"]),
            FakeSource("log", [], best_effort=True),
            FakeSource("gone", available=False),
        ],
    )
    assert document["window"]["start"] == START
    assert document["window"]["end"] == END
    assert [s["source"] for s in document["sections"]] == ["a", "log"]
    first = document["sections"][0]
    assert first["events"] == [
        {
            "timestamp": "2024-01-01T00:00:00+00:00",
            "source": "a",
            "label": f"a-{START}",
            "line": f"a-{START}",
        }
    ]
    assert first["notes"] == ["(note)"]
    assert document["sections"][1]["best_effort"] is True


def test_json_report_is_one_document() -> None:
    out: List[str] = []
    write_json_report(WINDOW, [FakeSource("a", [START + 5])], out.append)
    assert len(out) == 1
    parsed = json.loads(out[0])
    assert parsed["sections"][0]["events"][0]["label"] == f"a-{START + 5}"

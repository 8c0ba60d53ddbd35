"""
Report assembly for swchanges.

This module wires the configured sources together, queries them one after
another in a fixed order and renders their findings as a text timeline or a
single JSON document.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List

import orjson

from swchanges_py.config import SwchangesConfig
from swchanges_py.sources import BaseSource, SourceResult
from swchanges_py.sources.applications import ApplicationsSource
from swchanges_py.sources.homebrew import (
    Homebrew,
    HomebrewCasksSource,
    HomebrewFormulaeSource,
)
from swchanges_py.sources.install_history import InstallHistorySource
from swchanges_py.sources.launchd import LaunchdSource
from swchanges_py.sources.receipts import ReceiptsSource
from swchanges_py.sources.unified_log import UnifiedLogSource
from swchanges_py.window import Window

logger = logging.getLogger("swchanges.report")


def build_sources(config: SwchangesConfig) -> List[BaseSource]:
    """Create the report sources, in report order, from *config*."""
    brew = Homebrew(binary=config.brew_binary, timeout=config.command_timeout)
    return [
        InstallHistorySource(path=config.install_history),
        ReceiptsSource(timeout=config.command_timeout),
        HomebrewFormulaeSource(brew),
        HomebrewCasksSource(brew),
        LaunchdSource(directories=config.launchd_dirs),
        ApplicationsSource(directories=config.application_dirs),
        UnifiedLogSource(
            processes=config.log_processes,
            keywords=config.log_keywords,
            timeout=config.command_timeout,
        ),
    ]


@dataclass
class Section:
    """One source's contribution to the report."""

    source: BaseSource
    result: SourceResult

    def lines(self) -> List[str]:
        """Report lines for this section's events, then its notes."""
        events = [self.source.format_event(e) for e in self.result.events]
        return events + self.result.notes


def query_source(source: BaseSource, window: Window) -> SourceResult:
    """
    Query a single source without letting its failure escape.

    Args:
        source: The source to query
        window: The reporting window

    Returns:
        The source's result, restricted to events inside the window
    """
    try:
        result = source.collect(window)
    except Exception as e:
        logger.warning(f"{source.title}: {e}")
        return SourceResult.failed(f"({source.name} failed: {e})")

    inside = [e for e in result.events if window.contains(e.timestamp)]
    if len(inside) != len(result.events):
        logger.debug(
            f"{source.title}: dropped {len(result.events) - len(inside)} "
            f"events outside the window"
        )
    return SourceResult(events=inside, notes=list(result.notes))


def collect_sections(window: Window, sources: List[BaseSource]) -> Iterator[Section]:
    """Query each available source in order, yielding as each one completes."""
    for source in sources:
        if not source.available():
            logger.debug(f"Skipping {source.title}: not installed")
            continue
        logger.debug(f"Querying {source.title}...")
        yield Section(source=source, result=query_source(source, window))


def overview_line(window: Window) -> str:
    return (
        f"## macOS software changes between {window.start_human} and "
        f"{window.end_human} (~{window.hours}h)"
    )


def section_header(source: BaseSource, window: Window) -> str:
    header = f"### {source.title} — {window.start_human} → {window.end_human}"
    if source.best_effort:
        header += " (best-effort)"
    return header


def write_text_report(
    window: Window, sources: List[BaseSource], write: Callable[[str], Any]
) -> None:
    """
    Write the text report, one section per available source.

    Each section is written as soon as its source returns, so an interrupted
    run still leaves the sections finished so far on the output.

    Args:
        window: The reporting window
        sources: Sources in report order
        write: Callable that writes one line of output
    """
    write(overview_line(window))
    for section in collect_sections(window, sources):
        write("")
        write(section_header(section.source, window))
        write("")
        for line in section.lines():
            write(line)


def report_document(window: Window, sources: List[BaseSource]) -> Dict[str, Any]:
    """Build the structured form of the report."""
    sections = []
    for section in collect_sections(window, sources):
        sections.append(
            {
                "source": section.source.name,
                "title": section.source.title,
                "best_effort": section.source.best_effort,
                "events": [
                    {
                        "timestamp": event.utc_iso(),
                        "source": event.source,
                        "label": event.label,
                        "line": section.source.format_event(event),
                    }
                    for event in section.result.events
                ],
                "notes": section.result.notes,
            }
        )
    return {
        "window": {
            "start": window.start_epoch,
            "end": window.end_epoch,
            "start_human": window.start_human,
            "end_human": window.end_human,
        },
        "sections": sections,
    }


def write_json_report(
    window: Window, sources: List[BaseSource], write: Callable[[str], Any]
) -> None:
    """Write the report as a single indented JSON document."""
    document = report_document(window, sources)
    write(orjson.dumps(document, option=orjson.OPT_INDENT_2).decode())

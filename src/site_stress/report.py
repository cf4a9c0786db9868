"""
Final report rendering and persistence.

The report is built from the post-run RunResult only, after every worker
has exited, and keeps the domains in the order the operator gave them.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from .enums import TransitionKind
from .exceptions import ReportError
from .i18n import describe_reason, get_message
from .models import DomainSnapshot, RunResult, TransitionEvent
from .monitor import format_duration


SEPARATOR = "-" * 50


def format_transition(event: TransitionEvent, language: str = "en") -> str:
    """One human-readable line for a transition log entry."""
    time_str = event.occurred_at.strftime("%H:%M:%S")
    if event.kind is TransitionKind.DOWN:
        return get_message(
            "transition.down",
            language,
            time=time_str,
            domain=event.domain,
            reason=describe_reason(event.reason, language),
        )
    return get_message(
        "transition.up",
        language,
        time=time_str,
        domain=event.domain,
        downtime=format_duration(event.downtime_seconds or 0.0),
    )


class ReportGenerator:
    """Formats, prints and stores the textual run report."""

    def __init__(self, language: str = "en") -> None:
        self._language = language

    def render(self, result: RunResult) -> list[str]:
        """Render the full report as a list of lines."""
        lines = [
            get_message(
                "report.title",
                self._language,
                timestamp=result.finished_at.strftime("%a, %d %b %Y %H:%M:%S %Z").strip(),
            ),
            get_message(
                "report.duration",
                self._language,
                duration=format_duration(result.duration_seconds),
            ),
            SEPARATOR,
        ]
        for snapshot in result.snapshots:
            lines.extend(self._render_domain(snapshot))
        return lines

    def _render_domain(self, snapshot: DomainSnapshot) -> list[str]:
        lang = self._language
        lines = [
            "",
            get_message("report.domain", lang, domain=snapshot.domain),
            get_message("report.target", lang, url=snapshot.target_url),
        ]
        if snapshot.resolution_error:
            lines.append(get_message("report.resolution_note", lang, error=snapshot.resolution_error))
        lines.extend([
            get_message("report.total", lang, count=snapshot.total),
            get_message("report.success", lang, count=snapshot.success),
            get_message("report.failure", lang, count=snapshot.failure),
            get_message("report.log", lang),
        ])
        if not snapshot.transitions:
            lines.append(get_message("report.no_events", lang))
        else:
            lines.extend("   " + format_transition(event, lang) for event in snapshot.transitions)
        return lines

    def print(self, lines: list[str], stream: Optional[TextIO] = None) -> None:
        """Print the rendered report under the results header."""
        stream = stream or sys.stdout
        stream.write("\n" + get_message("report.results_header", self._language) + "\n")
        for line in lines:
            stream.write(line + "\n")
        stream.flush()

    def write(self, lines: list[str], output_dir: Path, timestamp: datetime) -> Path:
        """
        Persist the report as ``report_<unix-time>.txt`` in ``output_dir``.

        Raises:
            ReportError: If the file cannot be written
        """
        path = Path(output_dir) / f"report_{int(timestamp.timestamp())}.txt"
        try:
            with open(path, "w", encoding="utf-8") as f:
                for line in lines:
                    f.write(line + "\n")
        except OSError as e:
            raise ReportError(
                code="report_write_failed",
                message=f"Cannot write report: {e}",
                details={"path": str(path)},
            ) from e
        return path

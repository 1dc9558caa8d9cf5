"""
reporting/writers.py
Render final scan results as text, JSON or CSV.

Layering: works on the summary / outcome objects it is handed (anything
with ``to_dict()`` and the outcome attributes). Does NOT import core.
"""

from __future__ import annotations

import csv
import json
import sys
from datetime import datetime, timezone
from typing import IO, Any, Optional, Sequence

from netscout.utils.constants import OUTPUT_FORMATS, PortStatus


CSV_HEADER = ["IP", "Port", "Status", "Timestamp", "Duration", "Error"]


class OutputError(Exception):
    """Raised when results cannot be written."""


def format_duration(seconds: float) -> str:
    """Human duration: 850µs, 12.345ms, 2.001s, 1m5.2s."""
    if seconds < 1e-3:
        return f"{seconds * 1e6:.0f}µs"
    if seconds < 1:
        return _trim(seconds * 1e3) + "ms"
    if seconds < 60:
        return _trim(seconds) + "s"
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}m{_trim(rest)}s"


def _trim(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def format_open_line(outcome: Any, live: bool = False) -> str:
    prefix = "[+] " if live else ""
    return f"{prefix}{outcome.host}:{outcome.port} - {outcome.status.value}"


# ─── Writer ───────────────────────────────────────────────────────────────────

class ResultWriter:
    """
    Write results in one of text / json / csv.

    In verbose text mode the open ports were already printed live through
    live_line(), so write() adds nothing.
    """

    def __init__(self, fmt: str = "text", stream: Optional[IO[str]] = None,
                 verbose: bool = False):
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown format: {fmt}")
        self.fmt = fmt
        self.stream = stream if stream is not None else sys.stdout
        self.verbose = verbose

    # ── Live output ──────────────────────────────────────────────────────────

    @property
    def prints_live(self) -> bool:
        return self.verbose and self.fmt == "text"

    def live_line(self, outcome: Any) -> None:
        """Listener for the aggregator: echo open ports as they arrive."""
        if outcome.status == PortStatus.OPEN:
            self._emit(format_open_line(outcome, live=True) + "\n")

    # ── Final output ─────────────────────────────────────────────────────────

    def write(self, summary: Any, results: Sequence[Any]) -> None:
        try:
            if self.fmt == "json":
                self._json(summary, results)
            elif self.fmt == "csv":
                self._csv(results)
            else:
                self._text(results)
            self.stream.flush()
        except OSError as exc:
            raise OutputError(f"failed to write results: {exc}") from exc

    def _text(self, results: Sequence[Any]) -> None:
        if self.prints_live:
            return
        for r in results:
            if r.status == PortStatus.OPEN:
                self.stream.write(format_open_line(r) + "\n")

    def _json(self, summary: Any, results: Sequence[Any]) -> None:
        json.dump({
            "summary": summary.to_dict(),
            "results": [r.to_dict() for r in results],
        }, self.stream, indent=2)
        self.stream.write("\n")

    def _csv(self, results: Sequence[Any]) -> None:
        writer = csv.writer(self.stream, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for r in results:
            writer.writerow([
                r.host,
                r.port,
                r.status.value,
                _rfc3339(r.timestamp),
                format_duration(r.duration_s),
                r.error or "",
            ])

    def _emit(self, text: str) -> None:
        try:
            self.stream.write(text)
            self.stream.flush()
        except OSError as exc:
            raise OutputError(f"failed to write results: {exc}") from exc


def _rfc3339(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.isoformat(timespec="seconds").replace("+00:00", "Z")

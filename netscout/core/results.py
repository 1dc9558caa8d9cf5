"""
core/results.py
Result aggregation for one scan session.

Workers hand outcomes over with submit(); a single collection task folds
them into the running counters. The counters and the outcome list are only
touched under one lock, and readers always get copies.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from netscout.core.errors import InternalInconsistencyError
from netscout.core.probe import ProbeOutcome
from netscout.utils.constants import PortStatus

log = logging.getLogger(__name__)

_END = object()   # end-of-stream marker on the outcome queue


# ─── Data Classes ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AggregateSnapshot:
    total_completed: int
    open:            int
    closed:          int
    filtered:        int
    errors:          int
    start_time:      datetime
    elapsed_s:       float
    end_time:        Optional[datetime] = None

    @property
    def rate_per_s(self) -> float:
        return self.total_completed / self.elapsed_s if self.elapsed_s > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_completed": self.total_completed,
            "open":            self.open,
            "closed":          self.closed,
            "filtered":        self.filtered,
            "errors":          self.errors,
            "start_time":      self.start_time.isoformat(),
            "end_time":        self.end_time.isoformat() if self.end_time else None,
            "elapsed_s":       round(self.elapsed_s, 6),
            "rate_per_s":      round(self.rate_per_s, 2),
        }


def result_sort_key(outcome: ProbeOutcome) -> Tuple:
    """Order by host (numerically for IP literals), then port."""
    try:
        addr = ipaddress.ip_address(outcome.host)
    except ValueError:
        return (1, 0, 0, outcome.host, outcome.port)
    return (0, addr.version, int(addr), "", outcome.port)


# ─── Aggregator ───────────────────────────────────────────────────────────────

class ResultAggregator:
    """
    Single sink for every probe outcome of a session.

    Lifecycle: start() → submit()* → close(). snapshot() may be called at
    any time, from any thread.
    """

    def __init__(self, listener: Optional[Callable[[ProbeOutcome], None]] = None):
        self._listener = listener
        self._listener_error: Optional[BaseException] = None
        self._lock = threading.Lock()
        self._queue: Optional[asyncio.Queue] = None
        self._collector: Optional[asyncio.Task] = None
        self._closing = False

        self._results: List[ProbeOutcome] = []
        self._counts: Dict[PortStatus, int] = {s: 0 for s in PortStatus}
        self._total = 0

        self._start_wall = datetime.now(timezone.utc)
        self._start_mono = time.monotonic()
        self._end_wall: Optional[datetime] = None
        self._elapsed_final: Optional[float] = None

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Launch the collection task on the running event loop."""
        if self._collector is not None:
            raise InternalInconsistencyError("aggregator already started")
        self._queue = asyncio.Queue()
        self._start_wall = datetime.now(timezone.utc)
        self._start_mono = time.monotonic()
        self._collector = asyncio.create_task(self._collect(), name="netscout-aggregator")

    def submit(self, outcome: ProbeOutcome) -> None:
        """Hand one outcome over. Never blocks, never drops."""
        if self._closing:
            raise InternalInconsistencyError("submit after aggregator close")
        if self._queue is None:
            raise InternalInconsistencyError("aggregator not started")
        self._queue.put_nowait(outcome)

    async def close(self) -> None:
        """
        Stop accepting outcomes and wait until every submitted one has
        been folded in. Raises InternalInconsistencyError if called twice,
        and re-raises the first listener failure once everything is folded.
        """
        if self._closing:
            raise InternalInconsistencyError("aggregator closed twice")
        self._closing = True

        if self._collector is not None:
            self._queue.put_nowait(_END)
            await self._collector

        with self._lock:
            self._end_wall = datetime.now(timezone.utc)
            self._elapsed_final = time.monotonic() - self._start_mono
        log.debug("aggregator closed after %d outcomes", self._total)
        if self._listener_error is not None:
            raise self._listener_error

    @property
    def closed(self) -> bool:
        return self._closing

    # ── Reads ─────────────────────────────────────────────────────────────────

    def snapshot(self) -> AggregateSnapshot:
        with self._lock:
            elapsed = (self._elapsed_final if self._elapsed_final is not None
                       else time.monotonic() - self._start_mono)
            return AggregateSnapshot(
                total_completed=self._total,
                open=self._counts[PortStatus.OPEN],
                closed=self._counts[PortStatus.CLOSED],
                filtered=self._counts[PortStatus.FILTERED],
                errors=self._counts[PortStatus.ERROR],
                start_time=self._start_wall,
                elapsed_s=elapsed,
                end_time=self._end_wall,
            )

    def final_summary(self) -> AggregateSnapshot:
        return self.snapshot()

    def all_results(self) -> List[ProbeOutcome]:
        """Every outcome folded so far, sorted by (host, port)."""
        with self._lock:
            results = list(self._results)
        results.sort(key=result_sort_key)
        return results

    # ── Collection loop ───────────────────────────────────────────────────────

    async def _collect(self) -> None:
        while True:
            item = await self._queue.get()
            if item is _END:
                return
            self._fold(item)
            if self._listener is not None and self._listener_error is None:
                try:
                    self._listener(item)
                except Exception as exc:
                    # keep folding; the failure surfaces from close()
                    log.error("result listener failed for %s:%d: %s",
                              item.host, item.port, exc)
                    self._listener_error = exc

    def _fold(self, outcome: ProbeOutcome) -> None:
        with self._lock:
            self._results.append(outcome)
            self._counts[outcome.status] += 1
            self._total += 1

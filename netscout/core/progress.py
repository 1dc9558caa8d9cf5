"""
core/progress.py
Periodic progress sampling of a running scan.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from netscout.core.cancel import CancelSignal
from netscout.core.errors import ScanCancelled
from netscout.core.results import ResultAggregator

log = logging.getLogger(__name__)


class ProgressMonitor:
    """
    Every ``interval_s`` read the aggregator snapshot and emit one line:

        Progress: 1200/5000 (24.0%) | Open: 3 | Rate: 240 probes/sec

    Rate is measured over the last interval only. Stops after the line that
    shows every task done (or after finish()), and silently on cancel.
    """

    def __init__(
        self,
        aggregator: ResultAggregator,
        total_tasks: int,
        cancel: CancelSignal,
        interval_s: float = 5.0,
        emit: Optional[Callable[[str], None]] = None,
    ):
        if not interval_s > 0:
            raise ValueError("progress interval must be positive")
        self._aggregator = aggregator
        self._total = total_tasks
        self._cancel = cancel
        self._interval = interval_s
        self._emit = emit or log.info
        self._ticks = 0
        self._finished = asyncio.Event()

    @property
    def ticks(self) -> int:
        return self._ticks

    def finish(self) -> None:
        """Workers are done: emit the last line now instead of at the next tick."""
        self._finished.set()

    async def run(self) -> None:
        previous = 0
        last = time.monotonic()
        while True:
            try:
                await self._cancel.guard(self._next_tick())
            except ScanCancelled:
                return

            now = time.monotonic()
            snap = self._aggregator.snapshot()
            current = snap.total_completed
            rate = (current - previous) / (now - last) if now > last else 0.0
            percent = current / self._total * 100 if self._total else 100.0

            self._emit(
                f"Progress: {current}/{self._total} ({percent:.1f}%) | "
                f"Open: {snap.open} | Rate: {rate:.0f} probes/sec"
            )
            self._ticks += 1
            previous, last = current, now

            if current >= self._total or self._finished.is_set():
                return

    async def _next_tick(self) -> None:
        try:
            await asyncio.wait_for(self._finished.wait(), self._interval)
        except asyncio.TimeoutError:
            pass

"""
core/timing.py
Dispatch pacing for the scan orchestrator.

The limiter hands out evenly spaced slots (interval = 1 / rate), like a
ticker: the first slot opens one interval after the first request, and a
caller that falls behind finds at most one slot waiting for it. No bursts
beyond that, no adaptive adjustment.
"""

from __future__ import annotations

import time
from typing import Optional

from netscout.core.cancel import CancelSignal


class RateLimiter:
    """Gate task submission to at most ``rate_per_s`` per second."""

    def __init__(self, rate_per_s: float):
        if not rate_per_s > 0:
            raise ValueError(f"rate must be positive, got {rate_per_s!r}")
        self._interval = 1.0 / rate_per_s
        self._next_slot: Optional[float] = None
        self._granted = 0

    @property
    def interval_s(self) -> float:
        return self._interval

    @property
    def granted(self) -> int:
        return self._granted

    async def wait(self, cancel: CancelSignal) -> None:
        """
        Return once the next slot opens.

        Raises ScanCancelled if the signal fires first (or already has).
        """
        if cancel.is_set():
            raise cancel.exception()

        now = time.monotonic()
        if self._next_slot is None:
            self._next_slot = now + self._interval

        delay = self._next_slot - now
        if delay > 0:
            await cancel.sleep(delay)

        # Stay on the slot grid; slots missed while nobody waited are
        # dropped, except the one just consumed.
        slot = self._next_slot + self._interval
        now = time.monotonic()
        if slot <= now:
            slot += (int((now - slot) // self._interval) + 1) * self._interval
        self._next_slot = slot
        self._granted += 1

"""
core/cancel.py
Broadcast cancellation signal shared by every flow of one scan session.

Set once, observed by many, never unset. All waiting happens on a single
future owned by the signal, so any number of worker loops can race their
own awaitables against it without spawning a watcher task each.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
from typing import Awaitable, Optional, TypeVar

from netscout.core.errors import ScanCancelled

T = TypeVar("T")


class CancelSignal:

    def __init__(self) -> None:
        self._fired = False
        self._reason = "scan cancelled"
        self._future: Optional[asyncio.Future] = None

    # ── State ────────────────────────────────────────────────────────────────

    def set(self, reason: Optional[str] = None) -> bool:
        """
        Fire the signal. Returns True only for the call that fired it;
        later calls change nothing.
        """
        if self._fired:
            return False
        self._fired = True
        if reason:
            self._reason = reason
        if self._future is not None and not self._future.done():
            self._future.set_result(None)
        return True

    def is_set(self) -> bool:
        return self._fired

    @property
    def reason(self) -> str:
        return self._reason

    def exception(self) -> ScanCancelled:
        return ScanCancelled(self._reason)

    # ── Waiting ──────────────────────────────────────────────────────────────

    async def wait(self) -> None:
        """Block until the signal fires."""
        if self._fired:
            return
        await asyncio.shield(self._fired_future())

    async def guard(self, aw: Awaitable[T]) -> T:
        """
        Await *aw* unless the signal fires first.

        Raises ScanCancelled (and cancels *aw*) if the signal wins. When
        both finish together the result of *aw* is returned.
        """
        if self._fired:
            if inspect.iscoroutine(aw):
                aw.close()
            raise self.exception()

        task = asyncio.ensure_future(aw)
        try:
            await asyncio.wait(
                {task, self._fired_future()},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            if not task.done():
                task.cancel()

        if task.done():
            return task.result()

        # The signal won; let the cancelled awaitable unwind first.
        with contextlib.suppress(asyncio.CancelledError):
            await task
        raise self.exception()

    async def sleep(self, delay: float) -> None:
        """Sleep for *delay* seconds; raises ScanCancelled if the signal fires."""
        await self.guard(asyncio.sleep(delay))

    def _fired_future(self) -> asyncio.Future:
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
            if self._fired:
                self._future.set_result(None)
        return self._future

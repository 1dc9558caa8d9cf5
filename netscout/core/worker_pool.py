"""
core/worker_pool.py
Fixed-size pool of probe workers fed from one bounded task queue.

  • size worker tasks, each: wait on {cancel, next task} → probe → submit
  • submit() blocks while the queue is full (backpressure, never drops)
  • close_source() lets workers drain what is queued, then exit
  • cancellation stops workers from pulling new tasks; a probe already
    running is finished and its outcome still reported
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from netscout.core.cancel import CancelSignal
from netscout.core.errors import InternalInconsistencyError, ScanCancelled
from netscout.core.probe import ProbeOutcome, ProbeTask, probe
from netscout.core.results import ResultAggregator
from netscout.utils.constants import (
    QUEUE_CEILING, QUEUE_PER_WORKER, WORKERS_MAX, WORKERS_MIN,
)

log = logging.getLogger(__name__)

ProbeFn = Callable[[ProbeTask, float], Awaitable[ProbeOutcome]]

_DONE = object()   # end-of-source marker, one per worker


def queue_capacity(workers: int) -> int:
    return min(workers * QUEUE_PER_WORKER, QUEUE_CEILING)


class WorkerPool:

    def __init__(
        self,
        size: int,
        aggregator: ResultAggregator,
        timeout_s: float,
        cancel: CancelSignal,
        probe_fn: ProbeFn = probe,
    ):
        if not (WORKERS_MIN <= size <= WORKERS_MAX):
            raise ValueError(
                f"worker count {size} out of range [{WORKERS_MIN}, {WORKERS_MAX}]"
            )
        self._size = size
        self._aggregator = aggregator
        self._timeout_s = timeout_s
        self._cancel = cancel
        self._probe = probe_fn

        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []
        self._source_closed = False
        self._probed = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return queue_capacity(self._size)

    @property
    def probed(self) -> int:
        """Tasks a worker has taken and probed so far."""
        return self._probed

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        if self._workers:
            raise InternalInconsistencyError("worker pool already started")
        self._queue = asyncio.Queue(maxsize=self.capacity)
        self._workers = [
            asyncio.create_task(self._run(), name=f"netscout-worker-{i}")
            for i in range(self._size)
        ]
        log.debug("started %d workers (queue capacity %d)", self._size, self.capacity)

    async def submit(self, task: ProbeTask) -> None:
        """
        Enqueue one task, waiting for room if the queue is full.

        Raises ScanCancelled if the signal has fired or fires while waiting.
        """
        if self._source_closed:
            raise InternalInconsistencyError("submit after task source closed")
        await self._put(task)

    async def close_source(self) -> None:
        """No more tasks; workers finish the queue then exit."""
        if self._source_closed:
            return
        self._source_closed = True
        if self._queue is None:
            return
        try:
            for _ in self._workers:
                await self._put(_DONE)
        except ScanCancelled:
            # workers leave on their own once cancelled
            pass

    async def wait(self) -> None:
        """Block until every worker loop has exited."""
        if self._workers:
            await asyncio.gather(*self._workers)
        log.debug("all %d workers stopped after %d probes", self._size, self._probed)

    # ── Internals ─────────────────────────────────────────────────────────────

    async def _put(self, item: object) -> None:
        if self._queue is None:
            raise InternalInconsistencyError("worker pool not started")
        if self._cancel.is_set():
            raise self._cancel.exception()
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            await self._cancel.guard(self._queue.put(item))

    async def _run(self) -> None:
        while True:
            if self._cancel.is_set():
                return
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                try:
                    item = await self._cancel.guard(self._queue.get())
                except ScanCancelled:
                    return
            if item is _DONE:
                return

            outcome = await self._probe(item, self._timeout_s)
            self._probed += 1
            self._aggregator.submit(outcome)

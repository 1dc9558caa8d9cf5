"""
core/scanner_engine.py
Scan session control loop.

  • host × port task stream in host-major order
  • optional rate limiting of task submission
  • bounded worker pool doing TCP-connect probes
  • one aggregator collecting every outcome exactly once
  • optional progress monitor
  • cooperative cancellation through one shared CancelSignal

Lifecycle:  IDLE → RUNNING → (DRAINING | CANCELLED) → CLOSED

Layering contract:
  Imports only: netscout.core, netscout.utils
  Does NOT import: netscout.reporting, netscout.main
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

from netscout.core.cancel import CancelSignal
from netscout.core.errors import InternalInconsistencyError, ScanCancelled
from netscout.core.port_parser import expand_ports
from netscout.core.probe import ProbeOutcome, ProbeTask, probe
from netscout.core.progress import ProgressMonitor
from netscout.core.results import AggregateSnapshot, ResultAggregator
from netscout.core.target_parser import expand_targets
from netscout.core.timing import RateLimiter
from netscout.core.worker_pool import ProbeFn, WorkerPool
from netscout.utils.config import ScanConfig
from netscout.utils.constants import (
    DEFAULT_PROGRESS_INTERVAL, DEFAULT_RATE_LIMIT, DEFAULT_TIMEOUT_S,
    DEFAULT_WORKERS,
)

log = logging.getLogger(__name__)

Reporter = Callable[[AggregateSnapshot, List[ProbeOutcome]], None]


class SessionState(str, Enum):
    IDLE      = "idle"
    RUNNING   = "running"
    DRAINING  = "draining"
    CANCELLED = "cancelled"
    CLOSED    = "closed"


class ScanSession:
    """
    One scan run over ``hosts × ports``.

    ``hosts`` and ``ports`` are taken as already expanded; build_session()
    does the expansion from a ScanConfig. Results stay readable after
    scan() returns or raises ScanCancelled.
    """

    def __init__(
        self,
        hosts: Sequence[str],
        ports: Sequence[int],
        *,
        workers: int = DEFAULT_WORKERS,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        rate_limit: float = DEFAULT_RATE_LIMIT,
        progress: bool = False,
        progress_interval_s: float = DEFAULT_PROGRESS_INTERVAL,
        progress_emit: Optional[Callable[[str], None]] = None,
        listener: Optional[Callable[[ProbeOutcome], None]] = None,
        reporter: Optional[Reporter] = None,
        probe_fn: ProbeFn = probe,
    ):
        self._hosts = list(hosts)
        self._ports = list(ports)
        self._workers = workers
        self._timeout_s = timeout_s
        self._rate_limit = rate_limit
        self._progress = progress
        self._progress_interval = progress_interval_s
        self._progress_emit = progress_emit
        self._reporter = reporter
        self._probe_fn = probe_fn

        self._aggregator = ResultAggregator(listener=listener)
        self._pool: Optional[WorkerPool] = None
        self._cancel: Optional[CancelSignal] = None
        self._state = SessionState.IDLE
        self._submitted = 0
        self._was_cancelled = False

    # ── Introspection ─────────────────────────────────────────────────────────

    @property
    def hosts(self) -> List[str]:
        return list(self._hosts)

    @property
    def ports(self) -> List[int]:
        return list(self._ports)

    @property
    def total_tasks(self) -> int:
        return len(self._hosts) * len(self._ports)

    @property
    def submitted(self) -> int:
        return self._submitted

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def cancelled(self) -> bool:
        return self._was_cancelled

    def snapshot(self) -> AggregateSnapshot:
        return self._aggregator.snapshot()

    def final_summary(self) -> AggregateSnapshot:
        return self._aggregator.final_summary()

    def all_results(self) -> List[ProbeOutcome]:
        return self._aggregator.all_results()

    # ── Scan ──────────────────────────────────────────────────────────────────

    async def scan(self, cancel: Optional[CancelSignal] = None) -> AggregateSnapshot:
        """
        Run the session to completion and return the final summary.

        Raises ScanCancelled if *cancel* fires first. Outcomes already
        collected remain available either way, and the reporter (if any)
        runs on both paths.
        """
        if self._state is not SessionState.IDLE:
            raise InternalInconsistencyError(
                f"scan() called on a session in state {self._state.value}"
            )
        self._cancel = cancel or CancelSignal()

        self._aggregator.start()
        self._pool = WorkerPool(
            self._workers, self._aggregator, self._timeout_s,
            self._cancel, probe_fn=self._probe_fn,
        )
        self._pool.start()

        monitor: Optional[asyncio.Task] = None
        progress: Optional[ProgressMonitor] = None
        if self._progress:
            progress = ProgressMonitor(
                self._aggregator, self.total_tasks, self._cancel,
                interval_s=self._progress_interval, emit=self._progress_emit,
            )
            monitor = asyncio.create_task(
                progress.run(),
                name="netscout-progress",
            )

        self._transition(SessionState.RUNNING)
        log.debug("scanning %d hosts × %d ports (%d probes) with %d workers",
                  len(self._hosts), len(self._ports), self.total_tasks, self._workers)

        try:
            try:
                await self._dispatch()
            except ScanCancelled:
                self._was_cancelled = True
                self._transition(SessionState.CANCELLED)
            else:
                self._transition(SessionState.DRAINING)

            await self._pool.close_source()
            await self._pool.wait()
            if self._cancel.is_set() and not self._was_cancelled:
                # fired after the last submission; queued tasks were skipped
                self._was_cancelled = True
                self._transition(SessionState.CANCELLED)

            # Drain barrier: every outcome a worker handed over is folded
            # before anyone reads the final results.
            try:
                await self._aggregator.close()
            finally:
                self._transition(SessionState.CLOSED)

            if monitor is not None:
                progress.finish()
                await monitor
        except BaseException:
            self._cancel.set("scan aborted")
            if monitor is not None and not monitor.done():
                monitor.cancel()
            raise

        summary = self.final_summary()
        if self._reporter is not None:
            self._reporter(summary, self.all_results())

        if self._was_cancelled:
            log.debug("scan cancelled after %d/%d submissions",
                      self._submitted, self.total_tasks)
            raise self._cancel.exception()
        return summary

    async def _dispatch(self) -> None:
        limiter = RateLimiter(self._rate_limit) if self._rate_limit > 0 else None
        cancel = self._cancel

        for host in self._hosts:
            for port in self._ports:
                if cancel.is_set():
                    raise cancel.exception()
                if limiter is not None:
                    await limiter.wait(cancel)
                await self._pool.submit(ProbeTask(host=host, port=port))
                self._submitted += 1

    def _transition(self, state: SessionState) -> None:
        log.debug("session %s → %s", self._state.value, state.value)
        self._state = state


# ─── Factory ──────────────────────────────────────────────────────────────────

def build_session(
    config: ScanConfig,
    *,
    listener: Optional[Callable[[ProbeOutcome], None]] = None,
    reporter: Optional[Reporter] = None,
    progress_emit: Optional[Callable[[str], None]] = None,
    probe_fn: ProbeFn = probe,
) -> ScanSession:
    """
    Expand targets and ports from *config* and build a session.

    Raises InvalidTargetError / InvalidPortError before anything is probed.
    """
    hosts = expand_targets(config.targets)
    ports = expand_ports(config.ports)
    return ScanSession(
        hosts, ports,
        workers=config.workers,
        timeout_s=config.timeout_s,
        rate_limit=config.rate_limit,
        progress=config.show_progress,
        progress_interval_s=config.progress_interval_s,
        progress_emit=progress_emit,
        listener=listener,
        reporter=reporter,
        probe_fn=probe_fn,
    )

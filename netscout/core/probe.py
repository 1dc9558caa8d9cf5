"""
core/probe.py
Single TCP-connect probe with a deadline.

  • asyncio.open_connection — non-blocking, no raw sockets needed
  • One attempt per call, no retries
  • Every failure becomes a ProbeOutcome; nothing is raised to the caller

Classification:
  connect succeeds                       → open
  deadline elapses (or ETIMEDOUT)        → filtered
  local resource exhaustion, bad input   → error
  any other OSError (refused, unreachable, DNS failure …) → closed
"""

from __future__ import annotations

import asyncio
import errno
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from netscout.utils.constants import PortStatus
from netscout.utils.logger import TRACE_LOGGER

# per-probe lines go to the trace logger, which -v does not enable
log = logging.getLogger(TRACE_LOGGER + ".probe")

# errno values that mean "this machine ran out of something", not "the
# remote end said no"
_RESOURCE_ERRNOS = frozenset(
    e for e in (
        getattr(errno, "EMFILE", None),
        getattr(errno, "ENFILE", None),
        getattr(errno, "ENOBUFS", None),
        getattr(errno, "ENOMEM", None),
    ) if e is not None
)

_TIMEOUT_ERRNOS = frozenset(
    e for e in (
        getattr(errno, "ETIMEDOUT", None),
        getattr(errno, "WSAETIMEDOUT", None),
    ) if e is not None
)


# ─── Data Classes ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProbeTask:
    host: str
    port: int


@dataclass(frozen=True)
class ProbeOutcome:
    host:       str
    port:       int
    status:     PortStatus
    timestamp:  datetime            # wall clock at probe start (UTC)
    duration_s: float
    error:      Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "host":        self.host,
            "port":        self.port,
            "status":      self.status.value,
            "timestamp":   self.timestamp.isoformat(),
            "duration_ms": round(self.duration_s * 1000, 3),
        }
        if self.error:
            d["error"] = self.error
        return d


# ─── Probe ────────────────────────────────────────────────────────────────────

async def probe(task: ProbeTask, timeout_s: float) -> ProbeOutcome:
    """Attempt one TCP connection to task.host:task.port. Never raises on
    network failure."""
    started = datetime.now(timezone.utc)
    t0 = time.monotonic()

    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(task.host, task.port),
            timeout=timeout_s,
        )
    except asyncio.TimeoutError:
        status, detail = PortStatus.FILTERED, "i/o timeout"
    except OSError as exc:
        status, detail = classify_os_error(exc), str(exc) or type(exc).__name__
    except (ValueError, TypeError, UnicodeError) as exc:
        # raised by the socket layer for unusable host strings
        status, detail = PortStatus.ERROR, str(exc) or type(exc).__name__
    else:
        status, detail = PortStatus.OPEN, None
        await _close_quietly(writer)

    elapsed = time.monotonic() - t0
    log.debug("%s:%d %s in %.1fms%s", task.host, task.port, status.value,
              elapsed * 1000, f" ({detail})" if detail else "")

    return ProbeOutcome(
        host=task.host,
        port=task.port,
        status=status,
        timestamp=started,
        duration_s=elapsed,
        error=detail,
    )


def classify_os_error(exc: OSError) -> PortStatus:
    """Map a failed connect's OSError onto a port status."""
    if isinstance(exc, TimeoutError) or exc.errno in _TIMEOUT_ERRNOS:
        return PortStatus.FILTERED
    if exc.errno in _RESOURCE_ERRNOS:
        return PortStatus.ERROR
    return PortStatus.CLOSED


async def _close_quietly(writer: asyncio.StreamWriter) -> None:
    writer.close()
    try:
        await writer.wait_closed()
    except OSError as exc:
        # peer reset during teardown; the port was open regardless
        log.debug("close after connect failed: %s", exc)


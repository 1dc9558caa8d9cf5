"""
NETscout Constants & Enums
Port states, engine limits and process exit codes.
"""

from enum import Enum


# ─── Port Status (as reported in every output format) ────────────────────────
class PortStatus(str, Enum):
    OPEN     = "open"
    CLOSED   = "closed"
    FILTERED = "filtered"
    ERROR    = "error"

    def __str__(self) -> str:
        return self.value


# ─── Port Parser Limits ───────────────────────────────────────────────────────
PORT_MIN          = 1
PORT_MAX          = 65535
PORT_RANGE_LIMIT  = 65536      # max ports a single "start-end" token may expand to

# ─── Target Parser Limits ─────────────────────────────────────────────────────
MAX_HOSTS_PER_BLOCK = 1 << 20  # refuse CIDR blocks larger than a /12

# ─── Engine Limits ────────────────────────────────────────────────────────────
WORKERS_MIN       = 1
WORKERS_MAX       = 10_000
TIMEOUT_MIN_S     = 0.001      # 1ms
TIMEOUT_MAX_S     = 300.0      # 5 minutes
QUEUE_PER_WORKER  = 10         # task queue lookahead per worker
QUEUE_CEILING     = 10_000     # hard cap on queued tasks

# ─── Defaults ─────────────────────────────────────────────────────────────────
DEFAULT_PORTS             = "80,443"
DEFAULT_WORKERS           = 100
DEFAULT_TIMEOUT_S         = 2.0
DEFAULT_RATE_LIMIT        = 0          # requests per second, 0 = unlimited
DEFAULT_FORMAT            = "text"
DEFAULT_PROGRESS_INTERVAL = 5.0
DEFAULT_CONFIG_FILE       = "netscout.yaml"

OUTPUT_FORMATS = ("text", "json", "csv")

# ─── Exit Codes ───────────────────────────────────────────────────────────────
EXIT_OK        = 0
EXIT_FAILURE   = 1
EXIT_CANCELLED = 130           # 128 + SIGINT

# ─── Layering Contract (hard import rules - enforced by tests) ───────────────
# netscout.core      → may import: netscout.utils
# netscout.reporting → may import: netscout.utils
# netscout.utils     → imports nothing from the package
# netscout.main      → wires everything together

"""
core/port_parser.py
Port specification parser.

Accepts:
  "80"                 → [80]
  "80,443"             → [80, 443]
  "8000-8002"          → [8000, 8001, 8002]
  "443,22,80-82,22"    → [443, 22, 80, 81, 82]   (first-seen order, deduped)

Rejects (fail fast on the first bad token):
  "abc", "0", "70000", "100-50", "1-2-3", "", None
"""

from __future__ import annotations

import re
from typing import Dict, List, Tuple

from netscout.core.errors import InvalidPortError, RangeTooLargeError
from netscout.utils.constants import PORT_MAX, PORT_MIN, PORT_RANGE_LIMIT


# ─── Parser ───────────────────────────────────────────────────────────────────

class PortParser:
    """
    Parse a comma-separated list of ports and port ranges.

    Output order follows the input text; duplicates keep their first
    position. All errors raise InvalidPortError with a readable message.
    """

    _SINGLE_RE = re.compile(r"^\d+$")
    _RANGE_RE  = re.compile(r"^(\d+)\s*-\s*(\d+)$")

    def __init__(self, range_limit: int = PORT_RANGE_LIMIT):
        self._range_limit = range_limit

    # ── Public API ────────────────────────────────────────────────────────────

    def parse(self, spec: str) -> List[int]:
        """
        Parse port spec → deduplicated list in first-seen order.

        Raises InvalidPortError (or RangeTooLargeError) on any invalid input.
        """
        if not isinstance(spec, str):
            raise InvalidPortError(f"Expected string, got {type(spec).__name__}")

        spec = spec.strip()
        if not spec:
            raise InvalidPortError("Port specification is empty")

        # dict keeps insertion order, so it doubles as an ordered set
        ports: Dict[int, None] = {}
        for part in spec.split(","):
            part = part.strip()
            if not part:
                continue
            for port in self._parse_token(part):
                ports.setdefault(port, None)

        if not ports:
            raise InvalidPortError(f"No valid ports parsed from: {spec!r}")

        return list(ports)

    def validate(self, spec: str) -> Tuple[bool, str]:
        """Return (ok, error_message). Never raises."""
        try:
            self.parse(spec)
            return True, ""
        except InvalidPortError as exc:
            return False, str(exc)

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _parse_token(self, token: str) -> range:
        if self._SINGLE_RE.match(token):
            port = self._validated(int(token))
            return range(port, port + 1)

        if "-" not in token:
            raise InvalidPortError(
                f"Invalid port token: {token!r}  "
                f"(expected integer or start-end range)"
            )

        m = self._RANGE_RE.match(token)
        if not m:
            raise InvalidPortError(f"Invalid port range: {token!r}")

        start, end = int(m.group(1)), int(m.group(2))
        self._validated(start)
        self._validated(end)
        if start > end:
            raise InvalidPortError(
                f"Invalid range {start}-{end}: start > end"
            )
        size = end - start + 1
        if size > self._range_limit:
            raise RangeTooLargeError(
                f"Range {start}-{end} spans {size} ports, "
                f"exceeds limit {self._range_limit}"
            )
        return range(start, end + 1)

    @staticmethod
    def _validated(port: int) -> int:
        if not (PORT_MIN <= port <= PORT_MAX):
            raise InvalidPortError(
                f"Port {port} out of valid range [{PORT_MIN}, {PORT_MAX}]"
            )
        return port


# ── Module-level convenience ──────────────────────────────────────────────────

_default_parser = PortParser()


def expand_ports(spec: str) -> List[int]:
    return _default_parser.parse(spec)

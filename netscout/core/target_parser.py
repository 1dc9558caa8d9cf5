"""
core/target_parser.py
Target specification parser.

Accepts IPv4/IPv6 literals and CIDR blocks:
  "10.0.0.5"           → ["10.0.0.5"]
  "10.0.0.0/30"        → ["10.0.0.1", "10.0.0.2"]   (network + broadcast dropped)
  "10.0.0.0/31"        → ["10.0.0.0", "10.0.0.1"]   (blocks of ≤ 2 kept whole)
  "10.0.0.7/30"        → host bits are masked, same as "10.0.0.4/30"

Output is deduplicated across all specs, in first-seen order.
"""

from __future__ import annotations

import ipaddress
from typing import Dict, Iterable, Iterator, List, Sequence

from netscout.core.errors import InvalidTargetError
from netscout.utils.constants import MAX_HOSTS_PER_BLOCK


class TargetParser:
    """Expand IP literals and CIDR blocks into individual addresses."""

    def __init__(self, max_hosts: int = MAX_HOSTS_PER_BLOCK):
        self._max_hosts = max_hosts

    def parse(self, specs: Sequence[str]) -> List[str]:
        """
        Expand every spec → deduplicated address list in first-seen order.

        Raises InvalidTargetError on the first invalid spec, or when no
        target is left once blank entries are skipped.
        """
        if isinstance(specs, str):
            specs = [specs]

        hosts: Dict[str, None] = {}
        for spec in specs:
            if not isinstance(spec, str):
                raise InvalidTargetError(
                    f"Expected string target, got {type(spec).__name__}"
                )
            spec = spec.strip()
            if not spec:
                continue
            for host in self._expand(spec):
                hosts.setdefault(host, None)

        if not hosts:
            raise InvalidTargetError("No valid targets found")
        return list(hosts)

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _expand(self, spec: str) -> Iterable[str]:
        if "/" not in spec:
            try:
                return [str(ipaddress.ip_address(spec))]
            except ValueError as exc:
                raise InvalidTargetError(f"Invalid IP address: {spec}") from exc

        try:
            net = ipaddress.ip_network(spec, strict=False)
        except ValueError as exc:
            raise InvalidTargetError(f"Invalid CIDR {spec}: {exc}") from exc

        if net.num_addresses > self._max_hosts:
            raise InvalidTargetError(
                f"CIDR {spec} holds {net.num_addresses} addresses, "
                f"exceeds limit {self._max_hosts}"
            )
        return self._block_hosts(net)

    @staticmethod
    def _block_hosts(net: ipaddress.IPv4Network | ipaddress.IPv6Network) -> Iterator[str]:
        # Drop the first and last address of any block bigger than two.
        # IPv6 blocks are trimmed the same way.
        first = int(net.network_address)
        last = int(net.broadcast_address)
        if net.num_addresses > 2:
            first, last = first + 1, last - 1
        addr_cls = type(net.network_address)
        for value in range(first, last + 1):
            yield str(addr_cls(value))


# ── Module-level convenience ──────────────────────────────────────────────────

_default_parser = TargetParser()


def expand_targets(specs: Sequence[str]) -> List[str]:
    return _default_parser.parse(specs)

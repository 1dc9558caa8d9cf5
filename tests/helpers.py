"""Test helpers shared across modules."""

from datetime import datetime, timezone

from netscout.core.probe import ProbeOutcome
from netscout.utils.constants import PortStatus


def make_outcome(host="10.0.0.1", port=80, status=PortStatus.OPEN,
                 duration_s=0.001, error=None):
    return ProbeOutcome(
        host=host, port=port, status=status,
        timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        duration_s=duration_s, error=error,
    )

"""
core/errors.py
Exception taxonomy for the scan engine.

Probe failures are never raised: they become ProbeOutcome data. Only input
validation, cancellation and API misuse surface as exceptions.
"""


class NetScoutError(Exception):
    """Base class for all NETscout errors."""


class InvalidTargetError(NetScoutError, ValueError):
    """A target is neither an IP literal nor a CIDR block."""


class InvalidPortError(NetScoutError, ValueError):
    """A port token is malformed, out of range, or a reversed range."""


class RangeTooLargeError(InvalidPortError):
    """A single port range expands to more ports than allowed."""


class ScanCancelled(NetScoutError):
    """The session's cancellation signal fired before the scan finished."""

    def __init__(self, reason: str = "scan cancelled"):
        super().__init__(reason)
        self.reason = reason


class InternalInconsistencyError(NetScoutError, RuntimeError):
    """An engine component was driven outside its lifecycle."""

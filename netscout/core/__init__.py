"""
NETscout Core — Public API

from netscout.core import ScanSession, build_session, expand_targets, expand_ports
"""
from netscout.core.errors         import (NetScoutError, InvalidTargetError, InvalidPortError,
                                          RangeTooLargeError, ScanCancelled,
                                          InternalInconsistencyError)
from netscout.core.cancel         import CancelSignal
from netscout.core.port_parser    import PortParser, expand_ports
from netscout.core.target_parser  import TargetParser, expand_targets
from netscout.core.probe          import ProbeTask, ProbeOutcome, probe
from netscout.core.timing         import RateLimiter
from netscout.core.results        import ResultAggregator, AggregateSnapshot
from netscout.core.worker_pool    import WorkerPool
from netscout.core.progress       import ProgressMonitor
from netscout.core.scanner_engine import ScanSession, SessionState, build_session

__all__ = [
    "ScanSession", "SessionState", "build_session",
    "ResultAggregator", "AggregateSnapshot",
    "WorkerPool", "RateLimiter", "ProgressMonitor", "CancelSignal",
    "ProbeTask", "ProbeOutcome", "probe",
    "PortParser", "expand_ports", "TargetParser", "expand_targets",
    "NetScoutError", "InvalidTargetError", "InvalidPortError",
    "RangeTooLargeError", "ScanCancelled", "InternalInconsistencyError",
]

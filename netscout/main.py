#!/usr/bin/env python3
"""
NETscout — Concurrent TCP Reachability Scanner
main.py — CLI entry point

Usage:
  netscout -t 192.168.1.1
  netscout -t 192.168.1.0/24 -p 22,80,443 -w 500 --timeout 500ms
  netscout -t 10.0.0.1,10.0.0.2 -p 1-1024 --rate 200 -f json -o scan.json
  netscout -t 127.0.0.1 -p 80,443,8080 -v
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from contextlib import ExitStack
from typing import IO, List, Optional

# uvloop for 2-4× speed on Linux/macOS
try:
    import uvloop
    _run = uvloop.run
except ImportError:
    _run = asyncio.run

from netscout import __version__
from netscout.core.cancel import CancelSignal
from netscout.core.errors import InvalidPortError, InvalidTargetError, ScanCancelled
from netscout.core.scanner_engine import ScanSession, build_session
from netscout.reporting.writers import OutputError, ResultWriter
from netscout.utils.config import (
    ConfigError, ScanConfig, load_config_file, split_targets,
)
from netscout.utils.constants import (
    DEFAULT_CONFIG_FILE, EXIT_CANCELLED, EXIT_FAILURE, EXIT_OK, OUTPUT_FORMATS,
)
from netscout.utils.logger import get_logger, set_verbose
from netscout.utils.validators import parse_duration

log = get_logger("netscout")


# ─── Signals ──────────────────────────────────────────────────────────────────

def _install_signal_handlers(cancel: CancelSignal) -> List[int]:
    """Route SIGINT/SIGTERM into the scan's cancel signal. Returns the
    signals actually hooked."""
    loop = asyncio.get_running_loop()
    hooked = []

    def _on_signal(name: str) -> None:
        if cancel.set(f"received {name}"):
            log.warning("Received interrupt signal, shutting down gracefully...")

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, sig.name)
        except (NotImplementedError, RuntimeError, ValueError):
            # Windows, or not on the main thread: Ctrl+C arrives as
            # KeyboardInterrupt instead
            continue
        hooked.append(sig)
    return hooked


def _remove_signal_handlers(hooked: List[int]) -> None:
    loop = asyncio.get_running_loop()
    for sig in hooked:
        loop.remove_signal_handler(sig)


# ─── Core scan runner ─────────────────────────────────────────────────────────

async def _run_scan(session: ScanSession) -> int:
    """Drive one session under signal control, return the exit code."""
    cancel = CancelSignal()
    hooked = _install_signal_handlers(cancel)
    try:
        await session.scan(cancel)
    except ScanCancelled:
        log.error("Scan cancelled by user")
        return EXIT_CANCELLED
    finally:
        _remove_signal_handlers(hooked)
    return EXIT_OK


def _print_summary(session: ScanSession) -> None:
    s = session.final_summary()
    log.info("")
    log.info("Scan completed:")
    log.info(f"  Total scanned : {s.total_completed}")
    log.info(f"  Open ports    : {s.open}")
    log.info(f"  Closed ports  : {s.closed}")
    log.info(f"  Filtered      : {s.filtered}")
    log.info(f"  Errors        : {s.errors}")
    log.info(f"  Duration      : {s.elapsed_s:.3f}s")
    log.info(f"  Rate          : {s.rate_per_s:.0f} probes/sec")


def run(cfg: ScanConfig, stream: Optional[IO[str]] = None) -> int:
    """Run a validated config end to end. Returns the process exit code."""
    writer = ResultWriter(cfg.output_format, stream, verbose=cfg.verbose)
    try:
        session = build_session(
            cfg,
            listener=writer.live_line if writer.prints_live else None,
            reporter=writer.write,
        )
    except (InvalidTargetError, InvalidPortError) as exc:
        log.error(f"Failed to create scanner: {exc}")
        return EXIT_FAILURE

    with ExitStack() as stack:
        # only truncate an existing file once targets and ports are known good
        if stream is None and cfg.output_file:
            try:
                writer.stream = stack.enter_context(
                    open(cfg.output_file, "w", encoding="utf-8", newline="")
                )
            except OSError as exc:
                log.error(f"Failed to create output file: {exc}")
                return EXIT_FAILURE

        if cfg.verbose:
            log.info(f"Starting NETscout v{__version__}")
            log.info(f"Targets : {', '.join(cfg.targets)}")
            log.info(f"Ports   : {cfg.ports}")
            log.info(f"Workers : {cfg.workers}")
            log.info(f"Timeout : {cfg.timeout_s:g}s")
            if cfg.rate_limit:
                log.info(f"Rate    : {cfg.rate_limit} probes/sec")
            log.info(f"Scanning {len(session.hosts)} hosts across "
                     f"{len(session.ports)} ports ({session.total_tasks} total probes)")

        try:
            code = _run(_run_scan(session))
        except OutputError as exc:
            log.error(f"Scan failed: {exc}")
            return EXIT_FAILURE

        if code == EXIT_OK and cfg.verbose:
            _print_summary(session)
        return code


# ─── Config ───────────────────────────────────────────────────────────────────

def _resolve_config(args: argparse.Namespace) -> ScanConfig:
    """File defaults first, then every flag the user actually passed."""
    base = ScanConfig.from_mapping(load_config_file(args.config))

    def _duration(value: Optional[str], flag: str) -> Optional[float]:
        if value is None:
            return None
        try:
            return parse_duration(value)
        except ValueError as exc:
            raise ConfigError(f"{flag}: {exc}") from exc

    return base.merged({
        "targets":             split_targets(args.targets) if args.targets else None,
        "ports":               args.ports,
        "workers":             args.workers,
        "timeout_s":           _duration(args.timeout, "--timeout"),
        "rate_limit":          args.rate,
        "output_file":         args.output,
        "output_format":       args.format,
        "verbose":             True if args.verbose else None,
        "progress":            True if args.progress else None,
        "progress_interval_s": _duration(args.progress_interval, "--progress-interval"),
    })


# ─── CLI ──────────────────────────────────────────────────────────────────────

def build_cli() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="netscout",
        description="NETscout — concurrent TCP reachability scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Targets:      10.0.0.1  |  10.0.0.0/24  |  10.0.0.1,10.0.1.0/28
Port specs:   80  |  80,443  |  8000-9000  |  22,80,8000-8100
Durations:    500ms  |  2s  |  1m30s

Examples:
  %(prog)s -t 192.168.1.1
  %(prog)s -t 192.168.1.0/24 -p 1-1024 -w 500 --timeout 500ms
  %(prog)s -t 10.0.0.1 -p 1-65535 --rate 1000 -f csv -o out.csv
  %(prog)s -t 127.0.0.1 -p 22,80,443 -v
""",
    )
    g = ap.add_argument_group
    s = g("Scan")
    s.add_argument("-t", "--targets",  metavar="TARGETS",
                   help="Comma-separated IPs or CIDR ranges (required)")
    s.add_argument("-p", "--ports",    metavar="SPEC",
                   help="Ports to scan (default: 80,443)")
    s.add_argument("-w", "--workers",  metavar="N", type=int,
                   help="Concurrent workers, 1-10000 (default: 100)")
    s.add_argument("--timeout",        metavar="DURATION",
                   help="Per-probe connect timeout (default: 2s)")
    s.add_argument("--rate",           metavar="N", type=int,
                   help="Max probes per second, 0 = unlimited (default: 0)")

    o = g("Output")
    o.add_argument("-o", "--output",   metavar="FILE",
                   help="Write results to FILE (default: stdout)")
    o.add_argument("-f", "--format",   choices=list(OUTPUT_FORMATS),
                   help="Output format (default: text)")
    o.add_argument("-v", "--verbose",  action="store_true",
                   help="Live results, progress and summary on stderr")
    o.add_argument("--progress",       action="store_true",
                   help="Report progress periodically")
    o.add_argument("--progress-interval", metavar="DURATION",
                   help="Progress reporting interval (default: 5s)")

    ap.add_argument("--config",  default=DEFAULT_CONFIG_FILE, metavar="FILE",
                    help=f"YAML defaults file (default: {DEFAULT_CONFIG_FILE})")
    ap.add_argument("--version", action="version", version=f"NETscout v{__version__}")
    return ap


def main(argv: Optional[List[str]] = None) -> None:
    ap   = build_cli()
    args = ap.parse_args(argv)
    set_verbose(args.verbose)

    try:
        cfg = _resolve_config(args)
        if not cfg.targets:
            log.error("Error: target (-t) is required")
            ap.print_usage(sys.stderr)
            sys.exit(EXIT_FAILURE)
        cfg.validate()
    except ConfigError as exc:
        log.error(f"Configuration error: {exc}")
        sys.exit(EXIT_FAILURE)

    set_verbose(cfg.verbose)

    try:
        code = run(cfg)
    except KeyboardInterrupt:
        log.error("Scan cancelled by user")
        code = EXIT_CANCELLED
    except Exception as exc:
        log.exception(f"Scan failed: {exc}")
        code = EXIT_FAILURE
    sys.exit(code)


if __name__ == "__main__":
    main()

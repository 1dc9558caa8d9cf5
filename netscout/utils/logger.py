"""
utils/logger.py
Simple logging wrapper for NETscout
"""

import logging
import sys

# Per-probe tracing. Stays quiet in verbose mode; raise its level by hand
# (logging.getLogger(TRACE_LOGGER).setLevel(logging.DEBUG)) to see every probe.
TRACE_LOGGER = "netscout.trace"


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (usually module name)
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(level)

    # Results go to stdout, so diagnostics stay on stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)

    # Format: LEVEL - message
    formatter = logging.Formatter(
        '%(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def set_verbose(enabled: bool) -> None:
    """Switch the package logger between INFO and DEBUG."""
    log.setLevel(logging.DEBUG if enabled else logging.INFO)


# Default logger instance; module loggers ("netscout.core...") propagate to it
log = get_logger("netscout")
logging.getLogger(TRACE_LOGGER).setLevel(logging.INFO)


__all__ = ["get_logger", "log", "set_verbose", "TRACE_LOGGER"]

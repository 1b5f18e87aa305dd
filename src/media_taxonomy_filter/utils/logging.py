"""Logging helpers shared by every module."""

import logging
import os
import sys

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_handler: logging.Handler | None = None


def configure_logging(level: str | None = None) -> None:
    """Send package logs to the current stderr at the given level."""
    global _handler
    root = logging.getLogger("media_taxonomy_filter")
    resolved = (level or os.environ.get("MEDIA_TAXONOMY_FILTER_LOG_LEVEL") or "INFO").upper()
    root.setLevel(resolved)
    # rebind on every call; sys.stderr may have been swapped since the last one
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

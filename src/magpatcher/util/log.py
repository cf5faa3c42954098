"""Logging helpers — the SUCCESS level and debug-gated verbosity."""

from __future__ import annotations

import logging

SUCCESS: int = 25
"""Between INFO and WARNING; used for the final "all done" line."""

logging.addLevelName(SUCCESS, "SUCCESS")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"

PACKAGE_LOGGER = "magpatcher"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the root logger the way the server entry point does."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)


def apply_debug_flag(debug: bool) -> None:
    """Raise the package logger to DEBUG when the config asks for it.

    Per-item patch details are logged at DEBUG, so this is the switch that
    makes them visible.
    """
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if debug else logging.NOTSET)

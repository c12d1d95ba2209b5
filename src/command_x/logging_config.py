"""Logging setup shared by the API process and the scripts."""

from __future__ import annotations

import logging
import sys

from command_x.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the root logger.

    Safe to call more than once; only the level is updated on later calls.
    """
    global _configured
    root = logging.getLogger()
    root.setLevel(level or get_settings().log_level)
    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True

"""
Logging configuration for the application.

Design decisions:
- Basic format: Timestamp | Level | Logger | Message
- stdout output: Compatible with container logging (Docker, K8s)
- INFO level default: Verbose enough for debugging, not too noisy
- Idempotent setup: Safe to call from every Streamlit page

SECURITY:
- Application logs never contain raw client paths or filenames
- Use audit_log.py for structured request events
- Pass context with extra={...} (reason codes, request ids, counts)

Usage:
    from explorer.logging_config import setup_logging
    setup_logging()  # Call once at startup
"""

from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _level_from_env(default: int) -> int:
    name = os.getenv("LOG_LEVEL")
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure the root logger once.
    Idempotent: won't add duplicate handlers if already configured.
    LOG_LEVEL from the environment takes precedence over *level*.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    logging.basicConfig(
        level=_level_from_env(level),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

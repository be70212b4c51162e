#!/usr/bin/env python3
"""Logging setup and coloured console output."""

from __future__ import annotations

import logging
import sys


# Color codes for output
BLUE = '\033[94m'
GREEN = '\033[92m'
YELLOW = '\033[93m'
RED = '\033[91m'
RESET = '\033[0m'

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """
    Configure the logging module.

    Verbose mode enables DEBUG tracing (docker command lines, HTTP status
    codes, response bodies). Otherwise only warnings and errors are logged.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format='[%(levelname)s] %(message)s',
        force=True  # Reconfigure if already configured
    )

    # urllib3 is noisy at DEBUG and repeats what we already log
    logging.getLogger('urllib3').setLevel(max(level, logging.INFO))

    logger.debug("Verbose logging enabled")


def _emit(prefix: str, msg: str, stream=None) -> None:
    print(f"{prefix} {msg}" if msg else "", file=stream or sys.stdout, flush=True)


def info(msg: str = "") -> None:
    _emit(f"{BLUE}[INFO]{RESET}", msg)


def success(msg: str) -> None:
    _emit(f"{GREEN}[SUCCESS]{RESET}", msg)


def warn(msg: str) -> None:
    _emit(f"{YELLOW}[WARN]{RESET}", msg, stream=sys.stderr)


def error(msg: str) -> None:
    _emit(f"{RED}[ERROR]{RESET}", msg, stream=sys.stderr)

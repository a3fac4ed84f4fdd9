"""
Logging utilities for the ERP console.

Every module logs under the ``erp_console`` logger tree. The root of that
tree owns the only handler, so the server, the update host thread and the
page callbacks all write one consistent format to stderr.
"""

import logging
import os
from pathlib import Path

ROOT = "erp_console"

_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _root() -> logging.Logger:
    log = logging.getLogger(ROOT)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        log.addHandler(handler)
        log.setLevel(getattr(logging, _LEVEL, logging.INFO))
        log.propagate = False
    return log


def logger(name: str) -> logging.Logger:
    """
    Return the logger for a module.

    Args:
        name: Dotted name or a ``__file__`` path. Paths are reduced to the
            file stem, so ``.../updates/host.py`` logs as ``erp_console.host``.

    Returns:
        Child of the configured ``erp_console`` logger.
    """
    if "/" in name or "\\" in name:
        name = Path(name).stem
    return _root().getChild(name)


def quiet(*names: str, level: int = logging.WARNING) -> None:
    """Raise the level of noisy third-party loggers such as werkzeug."""
    for name in names:
        logging.getLogger(name).setLevel(level)

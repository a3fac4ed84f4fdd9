"""Path helpers for locating writable cache directories."""

import tempfile
from pathlib import Path


def temp_dir() -> Path:
    """Return the system temporary directory as a Path."""
    return Path(tempfile.gettempdir())


def cache_dir(configured: str | None = None) -> Path:
    """
    Return the directory used for on-disk caches.

    Args:
        configured: Explicit directory, usually from ERP_CACHE_DIR.

    Returns:
        The configured directory, or ``<tmp>/erp_console`` when unset.
    """
    if configured:
        return Path(configured).expanduser()
    return temp_dir() / "erp_console"

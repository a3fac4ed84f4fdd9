"""
Object utilities for stable hashing.

Disk cache keys are derived from the API base URL and the reference list
name, so switching APIs never serves another server's cached lists.
"""

import hashlib
import json
from typing import Any


def hash(obj: Any) -> str:
    """
    Return a stable hex digest of a JSON-serializable object.

    Keys are sorted before hashing so dictionaries built in a different
    order still produce the same digest.

    Args:
        obj: Any JSON-serializable object or list of objects.

    Returns:
        SHA-256 hexadecimal digest.
    """
    json_str = json.dumps(obj, sort_keys=True, default=str)
    return hashlib.sha256(json_str.encode("utf-8")).hexdigest()

"""
Local library modules shared by the services, the update host and the UI.

Modules:
    logs: Logging utilities
    objects: Stable hashing for cache keys
    paths: Cache directory helpers
    clients: HTTP client for the remote API
    caches: In-memory TTL cache and disk cache
    debounce: Last-write-wins delayed delivery
"""

from erp_console.lib import caches, clients, debounce, logs, objects, paths

__all__ = ["caches", "clients", "debounce", "logs", "objects", "paths"]

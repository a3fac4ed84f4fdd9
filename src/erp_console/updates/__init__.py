"""
Application update flow.

- channel: typed notifications (host to browser) and commands (browser to host)
- state: the UpdateSession state machine shared by both ends
- host: the server-side UpdateHost and its release backends
"""

from erp_console.updates.channel import HostEvent, HostNotification, UiCommand, UiRequest
from erp_console.updates.host import (
    DemoUpdateBackend,
    HttpUpdateBackend,
    UpdateBackend,
    UpdateError,
    UpdateHost,
    default_backend,
)
from erp_console.updates.state import UpdateSession, UpdateState

__all__ = [
    "DemoUpdateBackend",
    "HostEvent",
    "HostNotification",
    "HttpUpdateBackend",
    "UiCommand",
    "UiRequest",
    "UpdateBackend",
    "UpdateError",
    "UpdateHost",
    "UpdateSession",
    "UpdateState",
    "default_backend",
]

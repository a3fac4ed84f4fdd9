"""
Typed messages exchanged between the update host and the browser.

The host pushes HostNotification messages; the browser sends UiRequest
commands. Both directions are one-way: a command never gets a reply, its
effect is observed through the next notification. Messages travel as JSON
objects whose ``event`` or ``command`` key names the message; unknown names
are rejected with ValueError instead of being silently dropped.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class HostEvent(str, Enum):
    """Notifications pushed from the update host."""

    UPDATE_CHECKING = "update-checking"
    UPDATE_AVAILABLE = "update-available"
    UPDATE_NOT_AVAILABLE = "update-not-available"
    UPDATE_PROGRESS = "update-progress"
    UPDATE_DOWNLOADED = "update-downloaded"
    UPDATE_INSTALLING = "update-installing"
    UPDATE_ERROR = "update-error"
    UPDATE_STATE = "update-state"
    APP_VERSION = "app-version"


class UiCommand(str, Enum):
    """Commands sent from the browser to the update host."""

    GET_APP_VERSION = "get-app-version"
    MANUAL_CHECK_UPDATE = "manual-check-update"
    START_DOWNLOAD = "start-download"
    RESTART_APP = "restart-app"


def _require(data: Mapping[str, Any] | None, key: str) -> Any:
    if not isinstance(data, Mapping) or key not in data:
        raise ValueError(f"Message is missing '{key}': {data!r}")
    return data[key]


@dataclass(frozen=True, slots=True)
class HostNotification:
    """
    A notification from the update host.

    Attributes:
        event: Which notification this is.
        version: Offered version for update-available, running version for
            app-version.
        percent: Download progress 0..100 for update-progress.
        message: Failure description for update-error.
        state: Host state name for update-state, a snapshot of the whole
            cycle sent when a browser asks while a cycle is under way.
    """

    event: HostEvent
    version: str | None = None
    percent: float | None = None
    message: str | None = None
    state: str | None = None

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dictionary, omitting empty fields."""
        data: dict[str, Any] = {"event": self.event.value}
        if self.version is not None:
            data["version"] = self.version
        if self.percent is not None:
            data["percent"] = self.percent
        if self.message is not None:
            data["message"] = self.message
        if self.state is not None:
            data["state"] = self.state
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "HostNotification":
        """
        Deserialize a notification.

        Raises:
            ValueError: If the event is missing or unknown, or an update-state
                carries no state.
        """
        event = HostEvent(_require(data, "event"))
        if event is HostEvent.UPDATE_STATE:
            _require(data, "state")
        percent = data.get("percent")
        return cls(
            event=event,
            version=data.get("version"),
            percent=None if percent is None else float(percent),
            message=data.get("message"),
            state=data.get("state"),
        )


@dataclass(frozen=True, slots=True)
class UiRequest:
    """A command from the browser."""

    command: UiCommand

    def to_dict(self) -> dict:
        return {"command": self.command.value}

    def to_json(self) -> str:
        """Return the text frame sent over the WebSocket."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "UiRequest":
        """
        Deserialize a command.

        Raises:
            ValueError: If the command is missing or unknown.
        """
        return cls(command=UiCommand(_require(data, "command")))

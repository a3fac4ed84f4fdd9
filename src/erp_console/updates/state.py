"""
Update session state machine.

Both ends of the update channel keep an UpdateSession: the host to decide
which commands it may act on, the browser to decide what the banner shows.
Notifications are applied only when the transition table allows them from
the current state, so a late or duplicated notification never moves the
session backwards.

    IDLE ──> CHECKING ──> AVAILABLE ──> DOWNLOADING ──> DOWNLOADED ──> INSTALLING
               │                                                       (terminal)
               └──> IDLE (no update)
    CHECKING/AVAILABLE/DOWNLOADING/DOWNLOADED ──> FAILED ──> IDLE

An update-state notification is the exception: it carries the host's whole
session and replaces the browser's, so a browser that reloaded mid-cycle or
asked for a check after skipping catches up with the host.
"""

from dataclasses import dataclass
from enum import Enum

from erp_console.lib import logs
from erp_console.updates.channel import HostEvent, HostNotification

LOG = logs.logger(__file__)


class UpdateState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    AVAILABLE = "available"
    DOWNLOADING = "downloading"
    DOWNLOADED = "downloaded"
    INSTALLING = "installing"
    FAILED = "failed"


TRANSITIONS: dict[UpdateState, frozenset[UpdateState]] = {
    UpdateState.IDLE: frozenset({UpdateState.CHECKING}),
    UpdateState.CHECKING: frozenset(
        {UpdateState.AVAILABLE, UpdateState.IDLE, UpdateState.FAILED}
    ),
    UpdateState.AVAILABLE: frozenset({UpdateState.DOWNLOADING, UpdateState.FAILED}),
    UpdateState.DOWNLOADING: frozenset(
        {UpdateState.DOWNLOADING, UpdateState.DOWNLOADED, UpdateState.FAILED}
    ),
    UpdateState.DOWNLOADED: frozenset({UpdateState.INSTALLING, UpdateState.FAILED}),
    UpdateState.INSTALLING: frozenset(),
    UpdateState.FAILED: frozenset({UpdateState.IDLE}),
}

_EVENT_TARGETS: dict[HostEvent, UpdateState] = {
    HostEvent.UPDATE_CHECKING: UpdateState.CHECKING,
    HostEvent.UPDATE_AVAILABLE: UpdateState.AVAILABLE,
    HostEvent.UPDATE_NOT_AVAILABLE: UpdateState.IDLE,
    HostEvent.UPDATE_PROGRESS: UpdateState.DOWNLOADING,
    HostEvent.UPDATE_DOWNLOADED: UpdateState.DOWNLOADED,
    HostEvent.UPDATE_INSTALLING: UpdateState.INSTALLING,
    HostEvent.UPDATE_ERROR: UpdateState.FAILED,
}

_BANNER_STATES = frozenset(
    {
        UpdateState.AVAILABLE,
        UpdateState.DOWNLOADING,
        UpdateState.DOWNLOADED,
        UpdateState.INSTALLING,
        UpdateState.FAILED,
    }
)


def can_transition(current: UpdateState, target: UpdateState) -> bool:
    """Return True if ``target`` is reachable from ``current`` in one step."""
    return target in TRANSITIONS[current]


@dataclass(slots=True)
class UpdateSession:
    """
    Progress of one update cycle.

    Attributes:
        state: Current state.
        version: Version offered by the last update-available.
        percent: Download progress 0..100.
        message: Failure message while FAILED.
        app_version: Running version reported by the host.
        dismissed: True once the user skipped the banner for this cycle.
    """

    state: UpdateState = UpdateState.IDLE
    version: str | None = None
    percent: float = 0.0
    message: str | None = None
    app_version: str | None = None
    dismissed: bool = False

    @property
    def banner_visible(self) -> bool:
        return self.state in _BANNER_STATES and not self.dismissed

    def apply(self, notification: HostNotification) -> bool:
        """
        Apply a host notification if the transition is allowed.

        Args:
            notification: Notification received from the host.

        Returns:
            True if the session changed, False if the notification was
            ignored because the transition is not allowed. An update-state
            snapshot always replaces the session and shows the banner again.
        """
        if notification.event is HostEvent.APP_VERSION:
            self.app_version = notification.version
            return True
        if notification.event is HostEvent.UPDATE_STATE:
            return self._restore(notification)

        target = _EVENT_TARGETS[notification.event]
        if not can_transition(self.state, target):
            LOG.info(
                "Ignoring %s in state %s", notification.event.value, self.state.value
            )
            return False

        if target is UpdateState.CHECKING:
            self.version = None
            self.percent = 0.0
            self.message = None
            self.dismissed = False
        elif target is UpdateState.AVAILABLE:
            self.version = notification.version
        elif target is UpdateState.DOWNLOADING:
            self.percent = min(max(notification.percent or 0.0, 0.0), 100.0)
        elif target is UpdateState.DOWNLOADED:
            self.percent = 100.0
        elif target is UpdateState.FAILED:
            self.message = notification.message or "Update failed"
        elif target is UpdateState.IDLE:
            self.message = None
        self.state = target
        return True

    def _restore(self, snapshot: HostNotification) -> bool:
        try:
            state = UpdateState(snapshot.state)
        except ValueError:
            LOG.warning("Ignoring snapshot with unknown state %r", snapshot.state)
            return False
        self.state = state
        self.version = snapshot.version
        self.percent = min(max(snapshot.percent or 0.0, 0.0), 100.0)
        self.message = snapshot.message
        self.dismissed = False
        return True

    def snapshot(self) -> HostNotification:
        """Return an update-state notification describing this session."""
        return HostNotification(
            HostEvent.UPDATE_STATE,
            version=self.version,
            percent=self.percent,
            message=self.message,
            state=self.state.value,
        )

    def skip(self) -> None:
        """Hide the banner. A download already in progress keeps running."""
        self.dismissed = True

    def recover(self) -> bool:
        """Leave FAILED for IDLE once the failure message has been shown."""
        if self.state is not UpdateState.FAILED:
            return False
        self.state = UpdateState.IDLE
        self.message = None
        return True

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dictionary."""
        return {
            "state": self.state.value,
            "version": self.version,
            "percent": self.percent,
            "message": self.message,
            "app_version": self.app_version,
            "dismissed": self.dismissed,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "UpdateSession":
        """Deserialize from dictionary."""
        if not data:
            return cls()
        return cls(
            state=UpdateState(data.get("state", UpdateState.IDLE.value)),
            version=data.get("version"),
            percent=data.get("percent", 0.0),
            message=data.get("message"),
            app_version=data.get("app_version"),
            dismissed=data.get("dismissed", False),
        )

"""
Update host: checks for, downloads and installs new console releases.

The host runs in the server process beside Flask. It receives UiRequest
commands from the browser, drives an UpdateBackend, and pushes every state
change back as a HostNotification through the ``publish`` callable
(normally the WebSocket broadcast). Long-running work runs off the
WebSocket thread through ``runner``.

Failures never propagate to the browser as exceptions: they are logged,
published as update-error, and the session falls back to idle after a
grace period so the console keeps working without the update.
"""

import os
import signal
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

import requests

from erp_console import __version__, config
from erp_console.lib import logs, paths
from erp_console.lib.debounce import Debouncer, TimerFactory, thread_timer
from erp_console.updates.channel import HostEvent, HostNotification, UiCommand, UiRequest
from erp_console.updates.state import UpdateSession, UpdateState

LOG = logs.logger(__file__)

ProgressCallback = Callable[[float], None]


class UpdateError(Exception):
    """Raised by backends when checking, downloading or installing fails."""


def version_tuple(version: str) -> tuple[int, ...]:
    """
    Parse ``"1.2.10"`` or ``"v1.2.10"`` into ``(1, 2, 10)``.

    Non-numeric suffixes of a part are ignored, so ``"1.3.0-beta"`` parses
    as ``(1, 3, 0)``.
    """
    parts = []
    for part in version.strip().lstrip("vV").split("."):
        digits = ""
        for char in part:
            if not char.isdigit():
                break
            digits += char
        parts.append(int(digits or 0))
    return tuple(parts)


def is_newer(candidate: str, current: str) -> bool:
    return version_tuple(candidate) > version_tuple(current)


class UpdateBackend(ABC):
    """Source of releases."""

    @abstractmethod
    def check(self) -> str | None:
        """Return the newer version on offer, or None when up to date."""

    @abstractmethod
    def download(self, progress: ProgressCallback) -> None:
        """Download the offered release, reporting percent 0..100."""

    @abstractmethod
    def install(self) -> None:
        """Install the downloaded release and restart the process."""


def _terminate() -> None:
    os.kill(os.getpid(), signal.SIGTERM)


class HttpUpdateBackend(UpdateBackend):
    """
    Releases described by a JSON feed.

    The feed is an object ``{"version": "0.2.0", "url": "https://..."}``
    naming the latest release and where its installer lives.

    Attributes:
        feed_url: URL of the JSON feed.
        current_version: Version of the running console.
        download_dir: Directory receiving the installer.
    """

    _CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        feed_url: str,
        current_version: str = __version__,
        download_dir: str | Path | None = None,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        exit_process: Callable[[], None] = _terminate,
    ) -> None:
        self.feed_url = feed_url
        self.current_version = current_version
        self.download_dir = Path(download_dir or paths.cache_dir(config.CACHE_DIR) / "updates")
        self._session = session or requests.Session()
        self._timeout = timeout
        self._exit_process = exit_process
        self._release: dict | None = None
        self._artifact: Path | None = None

    def check(self) -> str | None:
        try:
            resp = self._session.get(self.feed_url, timeout=self._timeout)
            resp.raise_for_status()
            release = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise UpdateError(f"Update check failed: {exc}") from exc
        version = release.get("version") if isinstance(release, dict) else None
        if not version or not release.get("url"):
            raise UpdateError("Update feed is missing version or url")
        if not is_newer(version, self.current_version):
            LOG.info("Up to date: %s (feed %s)", self.current_version, version)
            self._release = None
            return None
        self._release = release
        return version

    def download(self, progress: ProgressCallback) -> None:
        if self._release is None:
            raise UpdateError("No update to download")
        url = self._release["url"]
        target = self.download_dir / url.rstrip("/").rsplit("/", 1)[-1]
        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            with self._session.get(url, stream=True, timeout=self._timeout) as resp:
                resp.raise_for_status()
                size = int(resp.headers.get("Content-Length") or 0)
                received = 0
                with target.open("wb") as fh:
                    for chunk in resp.iter_content(chunk_size=self._CHUNK_SIZE):
                        fh.write(chunk)
                        received += len(chunk)
                        if size:
                            progress(min(received / size * 100, 100.0))
        except (requests.RequestException, OSError) as exc:
            raise UpdateError(f"Download failed: {exc}") from exc
        self._artifact = target
        LOG.info("Downloaded %s to %s", self._release["version"], target)

    def install(self) -> None:
        if self._artifact is None:
            raise UpdateError("No downloaded update to install")
        try:
            self._artifact.chmod(0o755)
            subprocess.Popen([str(self._artifact)], start_new_session=True)
        except OSError as exc:
            raise UpdateError(f"Install failed: {exc}") from exc
        LOG.info("Installer started, exiting")
        self._exit_process()


class DemoUpdateBackend(UpdateBackend):
    """Simulated release for development: always offers ``version``."""

    def __init__(
        self,
        version: str = "9.9.9",
        steps: int = 5,
        step_delay: float = 0.3,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.version = version
        self.steps = steps
        self.step_delay = step_delay
        self._sleep = sleep
        self.installed = False

    def check(self) -> str | None:
        return self.version

    def download(self, progress: ProgressCallback) -> None:
        for step in range(1, self.steps + 1):
            self._sleep(self.step_delay)
            progress(step / self.steps * 100)

    def install(self) -> None:
        LOG.info("Demo install of %s", self.version)
        self.installed = True


def _spawn(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, daemon=True).start()


class UpdateHost:
    """
    Host end of the update channel.

    Attributes:
        session: The host's view of the update cycle.
        failure_grace: Seconds an error is shown before falling back to idle.
    """

    def __init__(
        self,
        backend: UpdateBackend,
        publish: Callable[[HostNotification], None],
        app_version: str = __version__,
        failure_grace: float | None = None,
        check_delay: float | None = None,
        timer_factory: TimerFactory = thread_timer,
        runner: Callable[[Callable[[], None]], None] = _spawn,
    ) -> None:
        """
        Args:
            backend: Release source.
            publish: Delivers notifications to every connected browser.
            app_version: Running version reported for get-app-version.
            failure_grace: Seconds before FAILED falls back to IDLE, or None
                for ERP_UPDATE_FAILURE_GRACE.
            check_delay: Quiet period coalescing manual checks, or None for
                ERP_MANUAL_CHECK_DEBOUNCE.
            timer_factory: Builds the grace and debounce timers.
            runner: Runs check, download and install off the caller's thread.
        """
        self.backend = backend
        self.session = UpdateSession(app_version=app_version)
        self.failure_grace = config.UPDATE_FAILURE_GRACE if failure_grace is None else failure_grace
        self._publish = publish
        self._timer_factory = timer_factory
        self._runner = runner
        self._lock = threading.RLock()
        self._checks = Debouncer(
            lambda _: self._runner(self.check),
            config.MANUAL_CHECK_DEBOUNCE if check_delay is None else check_delay,
            timer_factory,
        )

    def start(self, auto_check: bool | None = None) -> None:
        """Check once at startup when auto-update is enabled."""
        if config.AUTO_UPDATE if auto_check is None else auto_check:
            self._runner(self.check)

    def handle(self, request: UiRequest) -> None:
        """Dispatch one browser command. Commands have no reply."""
        LOG.info("Update command: %s", request.command.value)
        if request.command is UiCommand.GET_APP_VERSION:
            self._emit(HostNotification(HostEvent.APP_VERSION, version=self.session.app_version))
            # a browser that connects mid-cycle starts idle and needs the current state
            if self.session.state is not UpdateState.IDLE:
                self._publish_snapshot()
        elif request.command is UiCommand.MANUAL_CHECK_UPDATE:
            self._checks.submit(None)
        elif request.command is UiCommand.START_DOWNLOAD:
            self._runner(self.download)
        elif request.command is UiCommand.RESTART_APP:
            self._runner(self.install)

    def check(self) -> None:
        """
        Ask the backend for a release.

        While a cycle is already under way the check is answered with a
        snapshot of the current state instead, which also brings a skipped
        banner back.
        """
        if not self._emit(HostNotification(HostEvent.UPDATE_CHECKING)):
            self._publish_snapshot()
            return
        try:
            version = self.backend.check()
        except UpdateError as exc:
            self._fail(exc)
            return
        if version is None:
            self._emit(HostNotification(HostEvent.UPDATE_NOT_AVAILABLE))
        else:
            self._emit(HostNotification(HostEvent.UPDATE_AVAILABLE, version=version))

    def download(self) -> None:
        if self.session.state is not UpdateState.AVAILABLE:
            LOG.info("Ignoring download in state %s", self.session.state.value)
            return
        self._emit(HostNotification(HostEvent.UPDATE_PROGRESS, percent=0.0))
        try:
            self.backend.download(
                lambda percent: self._emit(HostNotification(HostEvent.UPDATE_PROGRESS, percent=percent))
            )
        except UpdateError as exc:
            self._fail(exc)
            return
        self._emit(HostNotification(HostEvent.UPDATE_DOWNLOADED))

    def install(self) -> None:
        if not self._emit(HostNotification(HostEvent.UPDATE_INSTALLING)):
            return
        try:
            self.backend.install()
        except UpdateError:
            LOG.error("Update install failed", exc_info=True)

    def _emit(self, notification: HostNotification) -> bool:
        with self._lock:
            applied = self.session.apply(notification)
        if applied:
            self._publish(notification)
        return applied

    def _publish_snapshot(self) -> None:
        with self._lock:
            snapshot = self.session.snapshot()
        self._publish(snapshot)

    def _fail(self, exc: Exception) -> None:
        LOG.warning("Update failed: %s", exc)
        if self._emit(HostNotification(HostEvent.UPDATE_ERROR, message=str(exc))):
            timer = self._timer_factory(self.failure_grace, self._recover)
            timer.start()

    def _recover(self) -> None:
        self._emit(HostNotification(HostEvent.UPDATE_NOT_AVAILABLE))


class UnconfiguredUpdateBackend(UpdateBackend):
    """Backend used when no update feed is configured; it never offers a release."""

    def check(self) -> str | None:
        LOG.info("No update feed configured (set ERP_UPDATE_FEED_URL)")
        return None

    def download(self, progress: ProgressCallback) -> None:
        raise UpdateError("Updates are not configured")

    def install(self) -> None:
        raise UpdateError("Updates are not configured")


def default_backend() -> UpdateBackend:
    """Return the backend selected by ERP_UPDATE_FEED_URL and ERP_SERVICE."""
    if config.UPDATE_FEED_URL:
        return HttpUpdateBackend(config.UPDATE_FEED_URL)
    if config.SERVICE_KIND == "demo":
        return DemoUpdateBackend()
    return UnconfiguredUpdateBackend()

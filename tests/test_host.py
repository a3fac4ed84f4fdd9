import pytest
from conftest import FakeResponse, FakeSession

from erp_console.updates.channel import HostEvent, UiCommand, UiRequest
from erp_console.updates.host import (
    DemoUpdateBackend,
    HttpUpdateBackend,
    UpdateBackend,
    UpdateError,
    UnconfiguredUpdateBackend,
    UpdateHost,
    is_newer,
    version_tuple,
)
from erp_console.updates.state import UpdateSession, UpdateState


class Backend(UpdateBackend):
    def __init__(self, version="2.0.0", check_error=None, download_error=None, install_error=None):
        self.version = version
        self.check_error = check_error
        self.download_error = download_error
        self.install_error = install_error
        self.checks = 0
        self.installed = False

    def check(self):
        self.checks += 1
        if self.check_error:
            raise self.check_error
        return self.version

    def download(self, progress):
        progress(50.0)
        if self.download_error:
            raise self.download_error
        progress(100.0)

    def install(self):
        if self.install_error:
            raise self.install_error
        self.installed = True


@pytest.fixture
def published():
    return []


def _host(backend, published, timers):
    return UpdateHost(
        backend,
        published.append,
        app_version="1.0.0",
        failure_grace=3,
        check_delay=0.5,
        timer_factory=timers,
        runner=lambda fn: fn(),
    )


def _events(published):
    return [n.event for n in published]


def test_app_version_is_answered_with_a_notification(published, timers):
    host = _host(Backend(), published, timers)
    host.handle(UiRequest(UiCommand.GET_APP_VERSION))
    assert _events(published) == [HostEvent.APP_VERSION]
    assert published[0].version == "1.0.0"


def test_manual_checks_are_coalesced(published, timers):
    backend = Backend()
    host = _host(backend, published, timers)
    for _ in range(3):
        host.handle(UiRequest(UiCommand.MANUAL_CHECK_UPDATE))
    assert backend.checks == 0
    timers.fire_all()
    assert backend.checks == 1
    assert _events(published) == [HostEvent.UPDATE_CHECKING, HostEvent.UPDATE_AVAILABLE]
    assert published[-1].version == "2.0.0"


def test_full_update_cycle(published, timers):
    backend = Backend()
    host = _host(backend, published, timers)
    host.check()
    host.handle(UiRequest(UiCommand.START_DOWNLOAD))
    host.handle(UiRequest(UiCommand.RESTART_APP))

    assert _events(published) == [
        HostEvent.UPDATE_CHECKING,
        HostEvent.UPDATE_AVAILABLE,
        HostEvent.UPDATE_PROGRESS,
        HostEvent.UPDATE_PROGRESS,
        HostEvent.UPDATE_PROGRESS,
        HostEvent.UPDATE_DOWNLOADED,
        HostEvent.UPDATE_INSTALLING,
    ]
    assert [n.percent for n in published if n.event is HostEvent.UPDATE_PROGRESS] == [0.0, 50.0, 100.0]
    assert backend.installed
    assert host.session.state is UpdateState.INSTALLING


def test_no_update_returns_to_idle(published, timers):
    host = _host(Backend(version=None), published, timers)
    host.check()
    assert _events(published) == [HostEvent.UPDATE_CHECKING, HostEvent.UPDATE_NOT_AVAILABLE]
    assert host.session.state is UpdateState.IDLE


def test_failure_falls_back_to_idle_after_grace(published, timers):
    host = _host(Backend(check_error=UpdateError("feed down")), published, timers)
    host.check()

    assert _events(published) == [HostEvent.UPDATE_CHECKING, HostEvent.UPDATE_ERROR]
    assert published[-1].message == "feed down"
    [grace] = timers.active
    assert grace.delay == 3

    timers.fire_all()
    assert _events(published)[-1] is HostEvent.UPDATE_NOT_AVAILABLE
    assert host.session.state is UpdateState.IDLE


def test_download_failure_is_reported(published, timers):
    host = _host(Backend(download_error=UpdateError("disk full")), published, timers)
    host.check()
    host.download()
    assert _events(published)[-1] is HostEvent.UPDATE_ERROR
    assert host.session.state is UpdateState.FAILED


def test_download_without_offer_is_ignored(published, timers):
    host = _host(Backend(), published, timers)
    host.handle(UiRequest(UiCommand.START_DOWNLOAD))
    host.handle(UiRequest(UiCommand.RESTART_APP))
    assert published == []


def test_install_failure_is_only_logged(published, timers):
    backend = Backend(install_error=UpdateError("locked"))
    host = _host(backend, published, timers)
    host.check()
    host.download()
    host.install()
    assert _events(published)[-1] is HostEvent.UPDATE_INSTALLING
    assert timers.active == []


def test_start_checks_only_when_enabled(published, timers):
    backend = Backend()
    host = _host(backend, published, timers)
    host.start(auto_check=False)
    assert backend.checks == 0
    host.start(auto_check=True)
    assert backend.checks == 1


def test_version_comparison():
    assert version_tuple("v1.2.10") == (1, 2, 10)
    assert version_tuple("1.3.0-beta") == (1, 3, 0)
    assert is_newer("1.10.0", "1.9.2")
    assert not is_newer("1.0.0", "1.0.0")


def test_demo_backend_reports_progress():
    steps = []
    backend = DemoUpdateBackend(version="9.9.9", steps=4, sleep=lambda _: None)
    assert backend.check() == "9.9.9"
    backend.download(steps.append)
    assert steps == [25.0, 50.0, 75.0, 100.0]
    backend.install()
    assert backend.installed


FEED = "https://updates.test/latest.json"
INSTALLER = "https://updates.test/erp-console-2.0.0.run"


def test_http_backend_downloads_offered_release(tmp_path):
    session = FakeSession(
        {
            ("GET", FEED): FakeResponse({"version": "2.0.0", "url": INSTALLER}),
            ("GET", INSTALLER): FakeResponse(
                {}, headers={"Content-Length": "8"}, chunks=[b"abcd", b"efgh"]
            ),
        }
    )
    exits = []
    backend = HttpUpdateBackend(
        FEED, current_version="1.0.0", download_dir=tmp_path, session=session, exit_process=lambda: exits.append(1)
    )
    assert backend.check() == "2.0.0"

    progress = []
    backend.download(progress.append)
    assert progress == [50.0, 100.0]
    assert (tmp_path / "erp-console-2.0.0.run").read_bytes() == b"abcdefgh"
    assert session.calls[-1][2]["stream"] is True


def test_http_backend_up_to_date():
    session = FakeSession({("GET", FEED): FakeResponse({"version": "1.0.0", "url": INSTALLER})})
    backend = HttpUpdateBackend(FEED, current_version="1.0.0", session=session)
    assert backend.check() is None
    with pytest.raises(UpdateError):
        backend.download(lambda _: None)


@pytest.mark.parametrize(
    "response",
    [FakeResponse({"version": "2.0.0"}), FakeResponse(status_code=500), FakeResponse(["2.0.0"])],
)
def test_http_backend_bad_feed(response):
    backend = HttpUpdateBackend(FEED, current_version="1.0.0", session=FakeSession({("GET", FEED): response}))
    with pytest.raises(UpdateError):
        backend.check()


def test_http_backend_install_requires_download():
    backend = HttpUpdateBackend(FEED, session=FakeSession())
    with pytest.raises(UpdateError):
        backend.install()


def _browser(published):
    session = UpdateSession()
    for notification in published:
        session.apply(notification)
    return session


def test_check_after_skip_shows_the_banner_again(published, timers):
    host = _host(DemoUpdateBackend(sleep=lambda _: None), published, timers)
    host.handle(UiRequest(UiCommand.MANUAL_CHECK_UPDATE))
    timers.fire_all()
    browser = _browser(published)
    assert browser.state is UpdateState.AVAILABLE
    browser.skip()
    assert not browser.banner_visible

    seen = len(published)
    host.handle(UiRequest(UiCommand.MANUAL_CHECK_UPDATE))
    timers.fire_all()

    assert _events(published[seen:]) == [HostEvent.UPDATE_STATE]
    assert browser.apply(published[-1])
    assert browser.banner_visible
    assert browser.version == "9.9.9"
    assert host.session.state is UpdateState.AVAILABLE


def test_browser_connecting_mid_download_catches_up(published, timers):
    backend = Backend()
    host = _host(backend, published, timers)
    host.check()
    host.download()
    assert host.session.state is UpdateState.DOWNLOADED

    seen = len(published)
    host.handle(UiRequest(UiCommand.GET_APP_VERSION))
    assert _events(published[seen:]) == [HostEvent.APP_VERSION, HostEvent.UPDATE_STATE]

    reloaded = UpdateSession()
    for notification in published[seen:]:
        reloaded.apply(notification)
    assert reloaded.state is UpdateState.DOWNLOADED
    assert reloaded.percent == 100.0
    assert reloaded.app_version == "1.0.0"

    host.handle(UiRequest(UiCommand.RESTART_APP))
    assert reloaded.apply(published[-1])
    assert reloaded.state is UpdateState.INSTALLING
    assert backend.installed


def test_unconfigured_backend_reports_no_update(published, timers):
    host = _host(UnconfiguredUpdateBackend(), published, timers)
    host.check()
    assert _events(published) == [HostEvent.UPDATE_CHECKING, HostEvent.UPDATE_NOT_AVAILABLE]
    assert host.session.state is UpdateState.IDLE
    with pytest.raises(UpdateError):
        UnconfiguredUpdateBackend().download(lambda _: None)

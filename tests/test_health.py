from conftest import BASE_URL, FakeResponse

from erp_console import health
from erp_console.lib.clients import ApiError


class Client:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def get(self, path, params=None):
        self.calls.append((path, params))
        if self.error:
            raise self.error
        return []


def test_check_api_reports_latency():
    ticks = iter([10.0, 10.25])
    client = Client()
    status = health.check_api(client, clock=lambda: next(ticks))
    assert status.online
    assert status.latency_ms == 250
    assert client.calls == [("/billing/history", {"limit": 1})]


def test_check_api_failure_is_not_raised():
    status = health.check_api(Client(ApiError("down", status=503)))
    assert status.status == health.ERROR
    assert not status.online
    assert status.latency_ms == 0


def test_check_api_treats_html_page_as_offline(api, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/billing/history")] = FakeResponse(body=b"<html>maintenance</html>")
    status = health.check_api(api)
    assert status.status == health.ERROR

"""Shared fakes for HTTP, timers and clocks."""

import json

import pytest
import requests

from erp_console.lib.clients import ApiClient


class FakeResponse:
    def __init__(self, payload=None, status_code=200, headers=None, chunks=None, body=None):
        self.status_code = status_code
        self.headers = headers or {}
        self._payload = payload
        self._chunks = chunks or []
        if body is not None:
            self.content = body
        else:
            self.content = b"" if payload is None else json.dumps(payload).encode()

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise requests.JSONDecodeError("Expecting value", self.content.decode(errors="replace"), 0)
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")

    def iter_content(self, chunk_size=1):
        yield from self._chunks

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """
    Records requests and answers from a route table.

    Routes map ``(method, url)`` to a FakeResponse or an exception instance.
    GET-only helpers (the update backend) go through ``get``.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.headers = {}
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url, kwargs))
        answer = self.routes.get((method, url))
        if answer is None:
            return FakeResponse({"detail": f"no route for {method} {url}"}, status_code=404)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def get(self, url, **kwargs):
        kwargs.pop("timeout", None)
        return self.request("GET", url, **kwargs)


class FakeTimer:
    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.fired = True
        self.fn()


class FakeTimers:
    """Timer factory that only fires when the test says so."""

    def __init__(self):
        self.created = []

    def __call__(self, delay, fn):
        timer = FakeTimer(delay, fn)
        self.created.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.created if t.started and not t.cancelled and not t.fired]

    def fire_all(self):
        for timer in self.active:
            timer.fire()


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


BASE_URL = "https://api.test/api"


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def api(fake_session):
    return ApiClient(BASE_URL, timeout=5, session=fake_session)


@pytest.fixture
def timers():
    return FakeTimers()


@pytest.fixture
def clock():
    return FakeClock()

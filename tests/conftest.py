"""Shared fixtures."""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from codetype.services.seed_data import initialize_default_data
from codetype.services.storage import Storage


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


class FakeTimer:
    """Records timer lifecycle; fire() simulates one periodic tick."""

    instances: list["FakeTimer"] = []

    def __init__(self, interval_sec, callback):
        self.interval_sec = interval_sec
        self.callback = callback
        self.started = False
        self.cancelled = False
        FakeTimer.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.callback()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_timers():
    FakeTimer.instances = []
    yield FakeTimer
    FakeTimer.instances = []


@pytest.fixture
def storage():
    s = Storage(":memory:")
    initialize_default_data(s)
    yield s
    s.close()


@pytest.fixture
def empty_storage():
    s = Storage(":memory:")
    yield s
    s.close()


@pytest.fixture
def app(storage):
    return create_app(storage=storage, auto_tick=False, seed=False)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def logged_in(client):
    r = client.get("/api/login")
    assert r.status_code == 200
    return client


@pytest.fixture
def python_language(storage):
    return storage.get_language_by_name("python")

from __future__ import annotations

import random
from collections import defaultdict

import pytest

from geoguess.game.catalog import LocationCatalog
from geoguess.game.coordinator import RoundCoordinator
from geoguess.game.registry import RoomRegistry
from geoguess.server import create_app


LOCATIONS = {
    "countries": [
        {"name": "Deutschland", "english_name": "Germany", "lat": 51.1657, "lng": 10.4515},
        {"name": "Frankreich", "english_name": "France", "lat": 46.2276, "lng": 2.2137},
        {"name": "Japan", "english_name": "Japan", "lat": 36.2048, "lng": 138.2529},
    ],
    "german-cities": [
        {"name": "Berlin", "lat": 52.52, "lng": 13.405},
        {"name": "Hamburg", "lat": 53.5511, "lng": 9.9937},
        {"name": "München", "lat": 48.1351, "lng": 11.582},
    ],
    "empty": [],
}


class TestConfig:
    __test__ = False

    TESTING = True
    SECRET_KEY = "test-secret"
    CORS_ORIGINS = "*"
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = "threading"
    LOG_LEVEL = "DEBUG"
    LOCATIONS_PATH = ""
    DEFAULT_GAME_MODE = "countries"
    DEFAULT_ROUND_DURATION_SEC = 60
    DEFAULT_TOTAL_ROUNDS = 10
    DEFAULT_RESULT_DELAY_SEC = 10
    MAX_ROUND_DURATION_SEC = 600
    MAX_TOTAL_ROUNDS = 50
    MAX_RESULT_DELAY_SEC = 120


class ManualTimer:
    def __init__(self, due: float, interval: float | None, callback) -> None:
        self.due = due
        self.interval = interval
        self.callback = callback
        self.cancelled = False
        self.done = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def live(self) -> bool:
        return not self.cancelled and not self.done


class ManualScheduler:
    """Virtual-time scheduler: nothing fires until ``advance`` is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay, callback) -> ManualTimer:
        timer = ManualTimer(self.now + delay, None, callback)
        self.timers.append(timer)
        return timer

    def call_every(self, interval, callback) -> ManualTimer:
        timer = ManualTimer(self.now + interval, interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[ManualTimer]:
        return [t for t in self.timers if t.live]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.timers if t.live and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            if timer.interval is None:
                timer.done = True
            else:
                timer.due += timer.interval
            timer.callback()
        self.now = target


class RecordingEmitter:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict, str | None]] = []

    def emit(self, event, data=None, to=None, **kwargs):
        self.sent.append((event, data, to))

    def payloads(self, event: str, to: str | None = None) -> list[dict]:
        return [data for name, data, target in self.sent if name == event and (to is None or target == to)]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture()
def catalog():
    return LocationCatalog(LOCATIONS, rng=random.Random(7))


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def emitter():
    return RecordingEmitter()


@pytest.fixture()
def registry(catalog):
    return RoomRegistry(catalog=catalog, config=TestConfig, rng=random.Random(42))


@pytest.fixture()
def coordinator(registry, catalog, scheduler, emitter):
    return RoundCoordinator(registry, catalog, scheduler, emitter)


@pytest.fixture()
def app_and_socketio(catalog, scheduler):
    return create_app(TestConfig, scheduler=scheduler, catalog=catalog)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def socketio(app_and_socketio):
    return app_and_socketio[1]


@pytest.fixture()
def services(flask_app):
    return flask_app.extensions["geoguess"]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app, socketio):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


def drain(sio_client) -> dict[str, list]:
    """Group every event the client got since the last call by name."""
    events = defaultdict(list)
    for pkt in sio_client.get_received():
        events[pkt["name"]].append(pkt["args"][0] if pkt["args"] else None)
    return events

import os
import sys
import pytest

# Ensure the backend root (containing the `tkd_scoring` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tkd_scoring import create_app, socketio
from tkd_scoring.services.match import MatchConfig, MatchEngine


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = '*'
    HOST = '127.0.0.1'
    PORT = 4444
    SERVER_IP = '192.168.1.50'
    MATCH_ROUNDS = 3
    MATCH_ROUND_DURATION_SEC = 120
    MATCH_GOLDEN_POINT = True
    CONSENSUS_ENABLED = True
    CONSENSUS_WINDOW_MS = 1000
    CONSENSUS_MIN_JUDGES = 2
    POINTS_BODY = 2
    POINTS_HEAD = 3
    POINTS_TECH = 1
    TIMER_TICK_MS = 100


class FakeClock:
    """Wall clock the tests move by hand."""

    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class ManualTask:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Records started tasks instead of running them; tests call engine.tick()."""

    def __init__(self):
        self.tasks = []

    def every(self, interval, callback):
        task = ManualTask(interval, callback)
        self.tasks.append(task)
        return task

    @property
    def active(self):
        return [t for t in self.tasks if not t.cancelled]


class Recorder:
    def __init__(self):
        self.ticks = []
        self.round_ends = []


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def make_engine(clock, scheduler, recorder):
    def _make(**overrides):
        engine = MatchEngine(
            defaults=MatchConfig(),
            scheduler=scheduler,
            clock=clock,
            on_tick=recorder.ticks.append,
            on_round_end=recorder.round_ends.append,
        )
        if overrides:
            engine.configure(overrides)
        return engine
    return _make


@pytest.fixture()
def engine(make_engine):
    return make_engine()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    application.extensions['match_engine'].shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass

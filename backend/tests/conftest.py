import os
import sys
import random
import pytest

# Ensure the backend root (containing the `trivia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from trivia import create_app, socketio
from trivia.services.game import GameSession, QuestionBank


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    QUESTIONS_FILE = os.path.join(BACKEND_ROOT, 'trivia', 'data', 'questions.json')
    QUESTION_TIME_LIMIT_SEC = 20
    REVEAL_DURATION_SEC = 5
    JOIN_GRACE_SEC = 3
    POINTS_CORRECT = 100
    POINTS_TIME_BONUS_PER_SEC = 5
    NICKNAME_MIN_LEN = 2
    NICKNAME_MAX_LEN = 15
    CHAT_MAX_LEN = 100
    MAX_PAYLOAD_CHARS = 2048
    CORS_ORIGINS = []


class ManualScheduler:
    """Collects background tasks instead of running them; tests fire them explicitly."""

    def __init__(self):
        self.tasks = []
        self.slept = []

    def start_background_task(self, target, *args, **kwargs):
        self.tasks.append((target, args, kwargs))

    def sleep(self, seconds):
        self.slept.append(seconds)

    def fire(self) -> int:
        """Run every task queued so far (not ones they queue). Returns how many ran."""
        batch, self.tasks = self.tasks, []
        for target, args, kwargs in batch:
            target(*args, **kwargs)
        return len(batch)


class FakeClock:

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    """In-memory transport: records what every attached sid would receive."""

    def __init__(self):
        self.outbox = {}
        self.closed = []

    def attach(self, sid):
        self.outbox.setdefault(sid, [])

    def detach(self, sid):
        self.outbox.pop(sid, None)

    def connected(self):
        return list(self.outbox)

    def close(self, sid):
        self.closed.append(sid)
        return True

    def send(self, sid, event, payload):
        if sid not in self.outbox:
            return False
        self.outbox[sid].append((event, payload))
        return True

    def broadcast(self, event, payload, skip_sid=None):
        sent = 0
        for sid in list(self.outbox):
            if sid != skip_sid:
                sent += self.send(sid, event, payload)
        return sent

    def received(self, sid, event=None):
        return [p for (e, p) in self.outbox.get(sid, []) if event is None or e == event]

    def last(self, sid, event):
        matching = self.received(sid, event)
        return matching[-1] if matching else None

    def flush(self):
        for sid in self.outbox:
            self.outbox[sid] = []


QUESTION_RECORDS = [
    {'title': 'The Lion King', 'emojis': '🦁👑', 'type': 'movie'},
    {'title': 'Finding Nemo', 'emojis': '🔍🐠', 'type': 'movie'},
    {'title': 'Harry Potter', 'emojis': '🧙‍♂️⚡👓', 'type': 'book'},
]


@pytest.fixture()
def config_class():
    return TestConfig


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def bank():
    return QuestionBank.from_records(QUESTION_RECORDS, rng=random.Random(7))


@pytest.fixture()
def game(bank, transport, scheduler, clock):
    config = {k: getattr(TestConfig, k) for k in dir(TestConfig) if k.isupper()}
    return GameSession(bank, transport, scheduler, config=config, clock=clock)


@pytest.fixture()
def flask_app(scheduler, clock):
    application = create_app(TestConfig, scheduler=scheduler, clock=clock)
    with application.app_context():
        yield application


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

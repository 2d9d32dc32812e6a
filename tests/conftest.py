"""
Shared fixtures: a fresh app on a file-backed SQLite database per test,
with a notifier that records codes instead of emailing them.
"""
import threading
from datetime import timedelta

import pytest

from app import create_app
from config import TestingConfig
from models import db
from utils.time_utils import utcnow


class RecordingNotifier:
    def __init__(self):
        self.sent = []
        self._lock = threading.Lock()

    def send_code(self, to_address, code, purpose):
        with self._lock:
            self.sent.append((to_address, code, purpose))

    def codes_for(self, email):
        with self._lock:
            return [code for to, code, _ in self.sent if to == email]

    def last_code(self, email):
        codes = self.codes_for(email)
        assert codes, f"no code was sent to {email}"
        return codes[-1]


class FailingNotifier:
    def __init__(self):
        self.calls = 0

    def send_code(self, to_address, code, purpose):
        self.calls += 1
        raise RuntimeError("SMTP connection refused")


class FakeClock:
    def __init__(self, start=None):
        self.now = start or utcnow()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


@pytest.fixture
def app(tmp_path, notifier):
    class _Config(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'auth.db'}"

    app = create_app(_Config, notifier=notifier)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def otp_authority(app):
    return app.extensions['otp_authority']


@pytest.fixture
def auth_service(app):
    return app.extensions['auth_service']


@pytest.fixture
def clock(otp_authority):
    """Freeze the OTP authority's notion of now; advance it explicitly."""
    fake = FakeClock()
    otp_authority.clock = fake
    return fake

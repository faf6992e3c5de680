"""
Pytest configuration and fixtures for the Shop Backend tests.
"""

import itertools
import os
import tempfile
import shutil

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing the app
TEST_DATA_DIR = tempfile.mkdtemp(prefix="shop_backend_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DATA_DIR}/shop.db"
os.environ["CLIENT_URL"] = "http://localhost:5173"
for name in ("PORT", "HOST", "WORKERS", "LOG_LEVEL"):
    os.environ.pop(name, None)

from shop_backend.configuration import load_settings
from shop_backend.app import create_app

CLIENT_URL = "http://localhost:5173"


@pytest.fixture(scope="session", autouse=True)
def test_data_dir():
    """Remove the temporary database directory after all tests."""
    yield TEST_DATA_DIR
    shutil.rmtree(TEST_DATA_DIR, ignore_errors=True)


@pytest.fixture
def settings():
    """Settings built from packaged defaults and the test environment."""
    return load_settings()


@pytest.fixture
def app(settings):
    """A fresh application per test so rate limit counters do not leak."""
    return create_app(settings)


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI app."""
    return TestClient(app)


class FakeProcess:
    """Stands in for multiprocessing.Process; 'dies' when alive is set False."""

    _pids = itertools.count(1000)

    def __init__(self, target=None, args=()):
        self.target = target
        self.args = args
        self.pid = None
        self.sentinel = object()
        self.alive = False
        self.exitcode = None
        self.joined = False
        self.terminated = False

    def start(self):
        self.pid = next(self._pids)
        self.alive = True

    def is_alive(self):
        return self.alive

    def join(self, timeout=None):
        self.joined = True

    def terminate(self):
        self.terminated = True
        self.alive = False
        self.exitcode = -15

    def kill(self):
        self.alive = False
        self.exitcode = -9

    def crash(self, exitcode=1):
        self.alive = False
        self.exitcode = exitcode


class FakeContext:
    """Minimal multiprocessing context recording every process it creates."""

    def __init__(self):
        self.created = []

    def Process(self, target=None, args=()):
        process = FakeProcess(target=target, args=args)
        self.created.append(process)
        return process


class FakeExitChannel:
    """Exit receiver returning the sentinels of workers that have died."""

    def __init__(self, context):
        self.context = context
        self.calls = []

    def __call__(self, sentinels, timeout=None):
        self.calls.append(timeout)
        dead = {p.sentinel for p in self.context.created if not p.alive}
        return [s for s in sentinels if s in dead]


@pytest.fixture
def fake_context():
    return FakeContext()


@pytest.fixture
def exit_channel(fake_context):
    return FakeExitChannel(fake_context)

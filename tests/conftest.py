"""Shared fixtures for the test-suite."""

import json
from unittest.mock import Mock

import pytest

from aspirant_network.api import AspirantAPI
from aspirant_network.config import get_settings
from aspirant_network.notifications import ToastQueue
from aspirant_network.session import AuthSession, ExamSession
from aspirant_network.storage import MemoryStore
from aspirant_network.sync import OptimisticUpdater


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def user_data():
    return {
        "_id": "u1",
        "name": "Asha Rao",
        "username": "asha",
        "primaryExam": "JEE",
        "secondaryExam": "NEET",
        "level": "Intermediate",
        "attemptYear": 2027,
        "credibilityScore": 12,
    }


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def auth(store):
    session = AuthSession(store)
    session.hydrate()
    return session


@pytest.fixture
def logged_in(auth, user_data):
    auth.login(user_data, "token-123")
    return auth


@pytest.fixture
def exam(logged_in):
    session = ExamSession(logged_in)
    yield session
    session.close()


@pytest.fixture
def toasts():
    return ToastQueue()


@pytest.fixture
def updater(toasts):
    return OptimisticUpdater(toasts=toasts)


@pytest.fixture
def api():
    """AspirantAPI with every service mocked out."""
    return Mock(spec_set=AspirantAPI(Mock()))


@pytest.fixture
def make_response():
    """Build a fake requests.Response carrying a JSON payload."""

    def _make(status_code=200, payload=None, text=""):
        response = Mock()
        response.status_code = status_code
        response.json.return_value = payload
        response.content = json.dumps(payload).encode() if payload is not None else b""
        response.text = text
        return response

    return _make

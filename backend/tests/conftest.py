"""Pytest fixtures: a scripted in-memory store and cheap security config."""
import pytest
from fastapi.testclient import TestClient

from models import Principal, Role
from repo_event_requests import EventRequestRepo
from repo_users import UserRepo
from security import PasswordHasher, TokenService
from service_admins import AdminService
from service_event_requests import EventRequestService
from service_users import UserService
from settings import Settings


class FakeStore:
    """Records every statement and answers with scripted row lists.

    Each `execute` call pops the next queued response; once the queue is
    empty it answers with no rows.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def execute(self, statement, args=()):
        self.calls.append((statement, list(args)))
        return self.responses.pop(0) if self.responses else []

    def ping(self):
        return None

    @property
    def statements(self):
        return [statement for statement, _ in self.calls]


@pytest.fixture
def config():
    return Settings(secret_key="test-secret", bcrypt_work_factor=4, jwt_expires_min=5)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def hasher(config):
    return PasswordHasher(config)


@pytest.fixture
def tokens(config):
    return TokenService(config)


@pytest.fixture
def users(store, hasher, tokens):
    return UserService(UserRepo(store), hasher, tokens)


@pytest.fixture
def event_requests(store):
    return EventRequestService(EventRequestRepo(store))


@pytest.fixture
def admins(users, event_requests):
    return AdminService(users, event_requests)


@pytest.fixture
def client(store, config):
    """FastAPI TestClient wired to the fake store and test settings."""
    from main import app, get_settings, get_store

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: config
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
OWNER = Principal(subject_id="u1", role=Role.ARTIST)
STRANGER = Principal(subject_id="u2", role=Role.ARTIST)
ADMIN = Principal(subject_id="a1", role=Role.ADMIN)


def user_row(userid="u1", password="stored-hash", **overrides) -> dict:
    """A `users` row as the store returns it, hash included."""
    row = {
        "userid": userid,
        "name": "Jo",
        "email": f"{userid}@example.com",
        "artistname": "DJ Jo",
        "usertype": "Artist",
        "venuename": None,
        "location": None,
        "password": password,
    }
    row.update(overrides)
    return row


def request_row(requestid="r1", userid="u1", **overrides) -> dict:
    """A `calendareventrequests` row."""
    row = {
        "requestid": requestid,
        "eventid": "e1",
        "userid": userid,
        "status": "Pending",
        "requestdate": "2026-11-01",
        "starttime": "2026-11-01T20:00:00+00:00",
        "endtime": "2026-11-01T23:00:00+00:00",
        "amount": "250.00",
        "artistname": "DJ Jo",
        "eventname": "Friday Night",
    }
    row.update(overrides)
    return row


def bearer(tokens: TokenService, principal: Principal) -> dict:
    return {"Authorization": f"Bearer {tokens.issue(principal.subject_id, principal.role)}"}

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from src.attendance_guard.attendance_guard.container import BACKEND_MEMORY, build_container
from src.attendance_guard.attendance_guard.core.enums import Role
from src.attendance_guard.attendance_guard.identities.model import Identity
from src.attendance_guard.attendance_guard.main import EXTENSION_KEY, create_app

ADMIN_ID = 1
EMPLOYEE_ID = 2
REMOTE_EMPLOYEE_ID = 3

OFFICE_NETWORKS = ("192.168.1.0/24", "127.0.0.1")


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime = datetime(2026, 3, 2, 8, 0, 0, tzinfo=timezone.utc)):
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            self._now = self._now + timedelta(seconds=1)
            return self._now


def seed_identities(container) -> None:
    repo = container.identities_repo
    repo.add(Identity(identity_id=ADMIN_ID, role=Role.ADMIN, full_name="Admin"))
    repo.add(Identity(identity_id=EMPLOYEE_ID, role=Role.EMPLOYEE, full_name="Employee"))
    repo.add(
        Identity(
            identity_id=REMOTE_EMPLOYEE_ID,
            role=Role.EMPLOYEE,
            full_name="Remote Employee",
            allowed_networks=("10.8.0.0/24",),
        )
    )
    container.company_allowlist.replace(OFFICE_NETWORKS)


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def container(clock):
    c = build_container(backend=BACKEND_MEMORY, allowlist_refresh_seconds=0, clock=clock)
    seed_identities(c)
    return c


@pytest.fixture
def admin(container):
    return container.identities_repo.get_by_id(ADMIN_ID)


@pytest.fixture
def employee(container):
    return container.identities_repo.get_by_id(EMPLOYEE_ID)


@pytest.fixture
def make_app(monkeypatch, clock):
    monkeypatch.setenv("APP_ENV", "testing")

    def _make(**overrides):
        settings = {
            "STORE_BACKEND": BACKEND_MEMORY,
            "AUTO_INIT_DB": False,
            "AUTO_SEED_DB": False,
            "ALLOWLIST_REFRESH_SECONDS": 0,
            "TRUSTED_PROXY_HOPS": 0,
        }
        settings.update(overrides)
        flask_app = create_app(settings, clock=clock)
        seed_identities(flask_app.extensions[EXTENSION_KEY])
        return flask_app

    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def app_container(app):
    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def client(app):
    return app.test_client()


def login_as(client, identity_id: int, role: Role) -> None:
    """Simulate the host application's login, which owns these session keys."""
    with client.session_transaction() as sess:
        sess["user_id"] = identity_id
        sess["role"] = role.value


@pytest.fixture
def login(client):
    def _login(identity_id: int, role: Role = Role.EMPLOYEE) -> None:
        login_as(client, identity_id, role)

    return _login

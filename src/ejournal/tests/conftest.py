# src/ejournal/tests/conftest.py
from __future__ import annotations

import logging
import os
import sys
from types import SimpleNamespace
from typing import Awaitable, Callable, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from ejournal.core.config import Settings
from ejournal.main import create_app

PASSWORD = "secret123"


# =========================
# Logging -> stdout
# =========================
@pytest.fixture(scope="session", autouse=True)
def _tests_log_to_stdout():
    """Send test logs to stdout so they show up under ``pytest -s``."""
    root = logging.getLogger()
    if not any(getattr(h, "stream", None) is sys.stdout for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(os.getenv("TEST_LOG_LEVEL", "INFO").upper())


# Make anyio run on asyncio (so our async fixtures work everywhere)
@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


# ==============================================================
# App + clients (in-memory SQLite, one database per test)
# ==============================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite://",
        DB_CREATE_ALL=True,
        DB_CONNECT_ATTEMPTS=1,
        DB_CONNECT_INTERVAL_SECONDS=0,
        DB_HEALTH_CHECK_SECONDS=0,
        LOG_JSON=False,
        TESTING=True,
    )


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    async with app.router.lifespan_context(app):
        yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def make_client(app) -> Callable[[], AsyncClient]:
    """Factory of clients with separate cookie jars, i.e. separate login sessions."""
    clients: list[AsyncClient] = []

    def _make() -> AsyncClient:
        c = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
        clients.append(c)
        return c

    yield _make
    for c in clients:
        await c.aclose()


@pytest.fixture
async def client(make_client) -> AsyncClient:
    return make_client()


# ==============================================================
# Seeding helpers (everything goes through the public API)
# ==============================================================

def user_payload(username: str, role: str, school_id: Optional[int] = None, **extra) -> dict:
    return {
        "username": username,
        "password": PASSWORD,
        "firstName": username.title(),
        "lastName": "Tester",
        "email": f"{username}@school.org",
        "role": role,
        "schoolId": school_id,
        **extra,
    }


@pytest.fixture
async def admin(make_client) -> AsyncClient:
    """Client logged in as the bootstrap super_admin."""
    c = make_client()
    r = await c.post("/api/register", json=user_payload("root", "super_admin"))
    assert r.status_code == 201, r.text
    return c


@pytest.fixture
def login(make_client) -> Callable[[str], Awaitable[AsyncClient]]:
    async def _login(username: str, password: str = PASSWORD) -> AsyncClient:
        c = make_client()
        r = await c.post("/api/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return c

    return _login


async def create(c: AsyncClient, path: str, payload: dict) -> dict:
    r = await c.post(path, json=payload)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
async def journal(admin, login) -> SimpleNamespace:
    """Two schools; school 1 has classes 10A/11A, a subject, two teachers, two students and a parent."""
    school = await create(admin, "/api/schools", {"name": "School 1", "address": "Main st 1", "city": "Town"})
    other_school = await create(admin, "/api/schools", {"name": "School 2", "address": "Side st 2", "city": "Town"})
    sid = school["id"]

    class_a = await create(
        admin, "/api/classes", {"name": "10A", "schoolId": sid, "gradeLevel": 10, "academicYear": "2024-2025"}
    )
    class_b = await create(
        admin, "/api/classes", {"name": "11A", "schoolId": sid, "gradeLevel": 11, "academicYear": "2024-2025"}
    )
    subject = await create(admin, "/api/subjects", {"name": "Math", "schoolId": sid})

    users = {}
    for username, role, school_id in (
        ("teacher", "teacher", sid),
        ("teacher2", "teacher", sid),
        ("student", "student", sid),
        ("student2", "student", sid),
        ("parent", "parent", sid),
        ("schooladmin", "school_admin", sid),
        ("otheradmin", "school_admin", other_school["id"]),
    ):
        users[username] = await create(admin, "/api/users", user_payload(username, role, school_id))

    for student in ("student", "student2"):
        await create(
            admin, "/api/student-classes", {"studentId": users[student]["id"], "classId": class_a["id"]}
        )
    await create(
        admin, "/api/parent-students", {"parentId": users["parent"]["id"], "studentId": users["student"]["id"]}
    )

    return SimpleNamespace(
        admin=admin,
        login=login,
        school_id=sid,
        other_school_id=other_school["id"],
        class_a=class_a["id"],
        class_b=class_b["id"],
        subject_id=subject["id"],
        ids={name: u["id"] for name, u in users.items()},
    )


def lesson_payload(j: SimpleNamespace, **extra) -> dict:
    payload = {
        "classId": j.class_a,
        "subjectId": j.subject_id,
        "teacherId": j.ids["teacher"],
        "dayOfWeek": 1,
        "startTime": "09:00",
        "endTime": "09:45",
    }
    payload.update(extra)
    return payload

import pytest

from ejournal.errors import STALE_SESSION_MESSAGE
from ejournal.tests.conftest import PASSWORD, create, user_payload

pytestmark = pytest.mark.anyio


async def test_bootstrap_super_admin_is_logged_in(admin):
    r = await admin.get("/api/user")
    assert r.status_code == 200
    body = r.json()
    assert body["username"] == "root"
    assert body["role"] == "super_admin"
    assert body["activeRole"] == "super_admin"
    assert "password" not in body


async def test_anonymous_cannot_register_other_roles(client):
    r = await client.post("/api/register", json=user_payload("sneaky", "teacher"))
    assert r.status_code == 403


async def test_duplicate_username(admin):
    r = await admin.post("/api/users", json=user_payload("root", "student"))
    assert r.status_code == 400
    assert r.json()["message"] == "Username already exists"


async def test_invalid_payload_is_400(admin):
    r = await admin.post("/api/users", json={**user_payload("bad", "student"), "email": "not-an-email"})
    assert r.status_code == 400
    assert "email" in r.json()["message"]


async def test_login_and_logout(admin, client):
    r = await client.post("/api/login", json={"username": "root", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid username or password"}

    assert (await client.get("/api/user")).json() == {"message": "Unauthorized"}

    r = await client.post("/api/login", json={"username": "root", "password": PASSWORD})
    assert r.status_code == 200
    assert (await client.get("/api/user")).status_code == 200

    assert (await client.post("/api/logout")).json() == {"message": "Logged out"}
    assert (await client.get("/api/user")).status_code == 401


async def test_switch_role(journal):
    teacher = await journal.login("teacher")
    own_menu = (await teacher.get("/api/menu")).json()
    assert own_menu["role"] == "teacher"

    r = await teacher.post("/api/switch-role", json={})
    assert r.status_code == 400
    assert r.json() == {"message": "Role is required"}

    r = await teacher.post("/api/switch-role", json={"role": "principal"})
    assert r.status_code == 403
    assert (await teacher.get("/api/user")).json()["activeRole"] == "teacher"

    await create(
        journal.admin,
        "/api/user-roles",
        {"userId": journal.ids["teacher"], "role": "principal", "schoolId": journal.school_id},
    )
    r = await teacher.post("/api/switch-role", json={"role": "principal"})
    assert r.status_code == 200, r.text
    assert r.json()["activeRole"] == "principal"
    assert r.json()["role"] == "teacher"

    menu = (await teacher.get("/api/menu")).json()
    assert menu["role"] == "principal"
    assert [i["id"] for i in menu["items"]] == [
        "dashboard", "users", "schedule", "grades", "messages",
        "documents", "analytics", "settings", "support",
    ]

    roles = (await teacher.get("/api/my-roles")).json()
    assert {r["role"]: r["isActive"] for r in roles} == {"teacher": False, "principal": True}

    logs = (await journal.admin.get("/api/system-logs", params={"action": "role_switched"})).json()
    assert len(logs) == 1
    assert logs[0]["userId"] == journal.ids["teacher"]
    assert logs[0]["details"] == "Switched role from teacher to principal"

    r = await teacher.post("/api/switch-role", json={"role": "teacher"})
    assert r.status_code == 200, r.text
    assert r.json()["activeRole"] == "teacher"
    assert (await teacher.get("/api/menu")).json() == own_menu
    roles = (await teacher.get("/api/my-roles")).json()
    assert {r["role"]: r["isActive"] for r in roles} == {"teacher": True, "principal": False}


async def test_menu_follows_primary_role(journal):
    parent = await journal.login("parent")
    menu = (await parent.get("/api/menu")).json()
    assert menu["role"] == "parent"
    assert [i["id"] for i in menu["items"]] == ["dashboard", "grades", "messages", "documents", "support"]


async def test_active_role_only_for_self(journal):
    teacher = await journal.login("teacher")
    r = await teacher.put(f"/api/users/{journal.ids['student']}/active-role", json={"activeRole": "student"})
    assert r.status_code == 403

    r = await teacher.put(f"/api/users/{journal.ids['teacher']}/active-role", json={"activeRole": "teacher"})
    assert r.status_code == 200
    assert r.json()["activeRole"] == "teacher"


async def test_class_teacher_assignment_needs_class(journal):
    r = await journal.admin.post(
        "/api/user-roles", json={"userId": journal.ids["teacher"], "role": "class_teacher"}
    )
    assert r.status_code == 400


async def test_forbidden_without_role(journal):
    student = await journal.login("student")
    r = await student.post("/api/schools", json={"name": "X", "address": "Y", "city": "Z"})
    assert r.status_code == 403
    assert r.json() == {"message": "Forbidden - Insufficient permissions"}


async def test_school_admin_limited_to_own_school(journal):
    school_admin = await journal.login("schooladmin")
    r = await school_admin.post(
        "/api/users", json=user_payload("elsewhere", "student", journal.other_school_id)
    )
    assert r.status_code == 403

    r = await school_admin.post("/api/users", json=user_payload("newkid", "student", journal.school_id))
    assert r.status_code == 201

    usernames = {u["username"] for u in (await school_admin.get("/api/users")).json()}
    assert "newkid" in usernames
    assert "otheradmin" not in usernames


async def test_deleted_user_session_is_stale(journal):
    teacher = await journal.login("teacher")
    r = await journal.admin.delete(f"/api/users/{journal.ids['teacher']}")
    assert r.status_code == 204

    r = await teacher.get("/api/user")
    assert r.status_code == 401
    assert r.json() == {"message": STALE_SESSION_MESSAGE}
    # the cleared session no longer points at the missing user
    assert (await teacher.get("/api/user")).json() == {"message": "Unauthorized"}


async def test_only_super_admin_changes_roles(journal):
    school_admin = await journal.login("schooladmin")
    url = f"/api/users/{journal.ids['teacher']}"

    r = await school_admin.patch(url, json={"role": "super_admin"})
    assert r.status_code == 403
    assert r.json() == {"message": "Cannot change user role"}

    r = await school_admin.patch(url, json={"role": "teacher", "firstName": "Anna"})
    assert r.status_code == 200, r.text
    assert (r.json()["role"], r.json()["firstName"]) == ("teacher", "Anna")

    r = await journal.admin.patch(url, json={"role": "class_teacher"})
    assert r.status_code == 200
    assert r.json()["role"] == "class_teacher"


async def test_null_user_fields_are_left_unchanged(journal):
    teacher = await journal.login("teacher")
    before = (await teacher.get("/api/user")).json()

    r = await teacher.patch(f"/api/users/{journal.ids['teacher']}", json={"role": None, "firstName": None})
    assert r.status_code == 200, r.text
    assert (r.json()["role"], r.json()["firstName"]) == (before["role"], before["firstName"])

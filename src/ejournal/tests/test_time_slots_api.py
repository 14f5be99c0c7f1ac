import pytest

pytestmark = pytest.mark.anyio


def slot(number: int, start: str, end: str) -> dict:
    return {"slotNumber": number, "startTime": start, "endTime": end}


async def test_defaults_need_super_admin(journal):
    school_admin = await journal.login("schooladmin")
    r = await school_admin.post("/api/time-slots/defaults", json=slot(1, "08:30", "09:15"))
    assert r.status_code == 403

    r = await journal.admin.post("/api/time-slots/defaults", json=slot(1, "8:30", "09:15"))
    assert r.status_code == 200
    assert r.json()["startTime"] == "08:30"
    assert r.json()["classId"] is None


async def test_default_slot_is_replaced_in_place(journal):
    admin = journal.admin
    first = (await admin.post("/api/time-slots/defaults", json=slot(1, "08:30", "09:15"))).json()
    second = (await admin.post("/api/time-slots/defaults", json=slot(1, "08:00", "08:45"))).json()
    assert first["id"] == second["id"]

    defaults = (await admin.get("/api/time-slots/defaults")).json()
    assert [(s["slotNumber"], s["startTime"], s["endTime"]) for s in defaults] == [(1, "08:00", "08:45")]


async def test_bad_slot_times(journal):
    r = await journal.admin.post("/api/time-slots/defaults", json=slot(1, "09:15", "08:30"))
    assert r.status_code == 400
    r = await journal.admin.post("/api/time-slots/defaults", json=slot(1, "25:00", "26:00"))
    assert r.status_code == 400
    r = await journal.admin.post("/api/time-slots/defaults", json=slot(-1, "08:30", "09:15"))
    assert r.status_code == 400


async def test_class_override_and_reset(journal):
    admin = journal.admin
    await admin.post("/api/time-slots/defaults", json=slot(3, "10:00", "10:45"))
    r = await admin.post(f"/api/class/{journal.class_a}/time-slots", json=slot(3, "10:15", "11:00"))
    assert r.status_code == 200
    assert r.json()["classId"] == journal.class_a

    teacher = await journal.login("teacher")
    resolved = (await teacher.get(f"/api/class/{journal.class_a}/time-slots/3/resolve")).json()
    assert resolved["label"] == "10:15-11:00"
    resolved = (await teacher.get(f"/api/class/{journal.class_b}/time-slots/3/resolve")).json()
    assert resolved["label"] == "10:00-10:45"

    effective = (await teacher.get(f"/api/class/{journal.class_a}/time-slots/effective")).json()
    assert effective == [{"slotNumber": 3, "startTime": "10:15", "endTime": "11:00", "isOverride": True}]

    overrides = (await teacher.get(f"/api/class/{journal.class_a}/time-slots")).json()
    assert [s["slotNumber"] for s in overrides] == [3]

    r = await admin.delete(f"/api/class/{journal.class_a}/time-slots/3")
    assert r.status_code == 204
    resolved = (await teacher.get(f"/api/class/{journal.class_a}/time-slots/3/resolve")).json()
    assert resolved["label"] == "10:00-10:45"

    r = await admin.delete(f"/api/class/{journal.class_a}/time-slots/3")
    assert r.status_code == 404


async def test_unknown_slot_resolves_to_placeholder(journal):
    teacher = await journal.login("teacher")
    resolved = (await teacher.get(f"/api/class/{journal.class_a}/time-slots/9/resolve")).json()
    assert resolved == {
        "slotNumber": 9,
        "classId": journal.class_a,
        "startTime": None,
        "endTime": None,
        "label": "—",
    }


async def test_override_for_missing_class(journal):
    r = await journal.admin.post("/api/class/9999/time-slots", json=slot(1, "08:30", "09:15"))
    assert r.status_code == 404


async def test_school_admin_overrides_only_own_classes(journal):
    other_admin = await journal.login("otheradmin")
    r = await other_admin.post(f"/api/class/{journal.class_a}/time-slots", json=slot(1, "08:30", "09:15"))
    assert r.status_code == 403

    school_admin = await journal.login("schooladmin")
    r = await school_admin.post(f"/api/class/{journal.class_a}/time-slots", json=slot(1, "08:30", "09:15"))
    assert r.status_code == 200

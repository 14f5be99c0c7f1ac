import pytest

from ejournal.tests.conftest import create, lesson_payload

pytestmark = pytest.mark.anyio


@pytest.fixture
async def lesson(journal) -> dict:
    return await create(journal.admin, "/api/schedules", lesson_payload(journal, scheduleDate="2024-05-06"))


def mark(journal, lesson, status: str, student: str = "student") -> dict:
    return {"studentId": journal.ids[student], "scheduleId": lesson["id"], "status": status}


async def test_absence_notifies_parent(journal, lesson):
    teacher = await journal.login("teacher")
    r = await teacher.post("/api/attendance", json=mark(journal, lesson, "absent"))
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "absent"

    parent = await journal.login("parent")
    notes = (await parent.get("/api/notifications")).json()
    assert len(notes) == 1
    assert notes[0]["title"] == "Absence"
    assert notes[0]["content"] == "Student Tester was absent from the lesson at 09:00"

    logs = (await journal.admin.get("/api/system-logs", params={"action": "attendance_created"})).json()
    assert len(logs) == 1


async def test_mark_is_replaced_not_duplicated(journal, lesson):
    teacher = await journal.login("teacher")
    first = (await teacher.post("/api/attendance", json=mark(journal, lesson, "absent"))).json()
    second = (await teacher.post("/api/attendance", json=mark(journal, lesson, "present"))).json()
    assert first["id"] == second["id"]

    records = (await teacher.get("/api/attendance", params={"scheduleId": lesson["id"]})).json()
    assert [(r["studentId"], r["status"]) for r in records] == [(journal.ids["student"], "present")]


async def test_sheet_counts_missing_records_as_present(journal, lesson):
    teacher = await journal.login("teacher")
    await teacher.post("/api/attendance", json=mark(journal, lesson, "absent"))

    sheet = (await teacher.get("/api/attendance/sheet", params={"scheduleId": lesson["id"]})).json()
    assert sheet == [
        {"studentId": journal.ids["student"], "present": False},
        {"studentId": journal.ids["student2"], "present": True},
    ]

    student = await journal.login("student")
    r = await student.get("/api/attendance/sheet", params={"scheduleId": lesson["id"]})
    assert r.status_code == 403


async def test_teacher_marks_only_own_lessons(journal, lesson):
    other = await journal.login("teacher2")
    r = await other.post("/api/attendance", json=mark(journal, lesson, "absent"))
    assert r.status_code == 403

    student = await journal.login("student")
    r = await student.post("/api/attendance", json=mark(journal, lesson, "absent"))
    assert r.status_code == 403


async def test_attendance_visibility(journal, lesson):
    teacher = await journal.login("teacher")
    await teacher.post("/api/attendance", json=mark(journal, lesson, "absent"))
    await teacher.post("/api/attendance", json=mark(journal, lesson, "absent", student="student2"))

    student = await journal.login("student")
    assert [r["studentId"] for r in (await student.get("/api/attendance")).json()] == [journal.ids["student"]]
    r = await student.get("/api/attendance", params={"studentId": journal.ids["student2"]})
    assert r.status_code == 403

    parent = await journal.login("parent")
    assert [r["studentId"] for r in (await parent.get("/api/attendance")).json()] == [journal.ids["student"]]

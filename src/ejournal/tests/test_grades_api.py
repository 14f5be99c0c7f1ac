import pytest

from ejournal.tests.conftest import create

pytestmark = pytest.mark.anyio


def grade_payload(journal, value: int, student: str = "student", **extra) -> dict:
    return {
        "studentId": journal.ids[student],
        "subjectId": journal.subject_id,
        "classId": journal.class_a,
        "grade": value,
        **extra,
    }


async def test_teacher_grades_and_student_is_notified(journal):
    teacher = await journal.login("teacher")
    grade = await create(teacher, "/api/grades", grade_payload(journal, 5, gradeType="test", date="2024-05-06"))
    assert grade["teacherId"] == journal.ids["teacher"]
    assert grade["gradeType"] == "test"
    assert grade["createdAt"].startswith("2024-05-06")

    student = await journal.login("student")
    assert (await student.get("/api/notifications/count")).json() == {"count": 1}
    notes = (await student.get("/api/notifications")).json()
    assert notes[0]["title"] == "New grade"
    assert notes[0]["content"] == "You received a 5 in Math"

    r = await student.post(f"/api/notifications/{notes[0]['id']}/read")
    assert r.json()["isRead"] is True
    assert (await student.get("/api/notifications/count")).json() == {"count": 0}


async def test_only_teachers_give_grades(journal):
    student = await journal.login("student")
    r = await student.post("/api/grades", json=grade_payload(journal, 5))
    assert r.status_code == 403


async def test_grade_range(journal):
    teacher = await journal.login("teacher")
    r = await teacher.post("/api/grades", json=grade_payload(journal, 6))
    assert r.status_code == 400
    r = await teacher.post("/api/grades", json=grade_payload(journal, 0))
    assert r.status_code == 400


async def test_grade_visibility(journal):
    teacher = await journal.login("teacher")
    mine = await create(teacher, "/api/grades", grade_payload(journal, 4))
    await create(teacher, "/api/grades", grade_payload(journal, 3, student="student2"))

    student = await journal.login("student")
    assert [g["id"] for g in (await student.get("/api/grades")).json()] == [mine["id"]]
    r = await student.get("/api/grades", params={"studentId": journal.ids["student2"]})
    assert r.status_code == 403
    r = await student.get("/api/grades", params={"classId": journal.class_a})
    assert r.status_code == 403

    parent = await journal.login("parent")
    assert [g["id"] for g in (await parent.get("/api/grades")).json()] == [mine["id"]]
    r = await parent.get("/api/grades", params={"studentId": journal.ids["student2"]})
    assert r.status_code == 403

    r = await teacher.get("/api/grades", params={"classId": journal.class_a})
    assert len(r.json()) == 2


async def test_only_the_grading_teacher_edits(journal):
    teacher = await journal.login("teacher")
    grade = await create(teacher, "/api/grades", grade_payload(journal, 3))
    url = f"/api/grades/{grade['id']}"

    other = await journal.login("teacher2")
    assert (await other.patch(url, json={"grade": 5})).status_code == 403
    assert (await other.delete(url)).status_code == 403

    r = await teacher.patch(url, json={"grade": 4, "comment": "retake"})
    assert r.status_code == 200
    assert (r.json()["grade"], r.json()["comment"]) == (4, "retake")

    assert (await teacher.delete(url)).status_code == 204
    assert (await teacher.delete(url)).status_code == 404


async def test_student_subject_averages(journal):
    teacher = await journal.login("teacher")
    await create(teacher, "/api/grades", grade_payload(journal, 5, date="2024-05-06"))
    await create(teacher, "/api/grades", grade_payload(journal, 4, date="2024-05-07"))
    await create(teacher, "/api/grades", grade_payload(journal, 2, date="2024-04-01"))

    r = await teacher.get("/api/student-subject-averages", params={"classId": journal.class_a})
    assert r.status_code == 200
    averages = r.json()
    sid = str(journal.subject_id)
    assert averages[str(journal.ids["student"])] == {sid: "3.7", "overall": "3.7"}
    assert averages[str(journal.ids["student2"])] == {"overall": "—"}

    r = await teacher.get(
        "/api/student-subject-averages",
        params={"classId": journal.class_a, "fromDate": "2024-05-01", "toDate": "2024-05-31"},
    )
    assert r.json()[str(journal.ids["student"])] == {sid: "4.5", "overall": "4.5"}

    student = await journal.login("student")
    r = await student.get("/api/student-subject-averages", params={"classId": journal.class_a})
    assert r.status_code == 403

from datetime import date, datetime, timezone
from types import SimpleNamespace

from ejournal.services.grade_stats import (
    attendance_sheet,
    average_grade,
    filter_grades,
    format_average,
    is_present,
    student_subject_averages,
    weighted_average_grade,
)


def grade(student_id, value, subject_id=1, class_id=1, grade_type="classwork", day=date(2024, 5, 6)):
    return SimpleNamespace(
        student_id=student_id,
        subject_id=subject_id,
        class_id=class_id,
        grade=value,
        grade_type=grade_type,
        created_at=datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc),
    )


GRADES = [
    grade(1, 5),
    grade(1, 4),
    grade(1, 3, subject_id=2),
    grade(2, 2, day=date(2024, 4, 1)),
    grade(2, 4, day=date(2024, 5, 20)),
]


def test_average_grade():
    assert average_grade(1, GRADES) == 4.0
    assert average_grade(1, GRADES, subject_id=1) == 4.5
    assert average_grade(3, GRADES) == "—"


def test_date_filters_are_inclusive():
    assert average_grade(2, GRADES, date_from=date(2024, 5, 1)) == 4.0
    assert average_grade(2, GRADES, date_to=date(2024, 4, 1)) == 2.0
    assert average_grade(2, GRADES, date_from=date(2024, 6, 1)) == "—"
    assert len(filter_grades(GRADES, class_id=1)) == 5
    assert filter_grades(GRADES, class_id=2) == []


def test_weighted_average_grade():
    records = [grade(1, 5, grade_type="exam"), grade(1, 2, grade_type="homework")]
    # (5 * 3 + 2 * 1) / 4
    assert weighted_average_grade(1, records) == 4.25
    assert weighted_average_grade(9, records) == "—"


def test_format_average():
    assert format_average(4.0) == "4.0"
    assert format_average(4.25) == "4.3"
    assert format_average(sum([4, 4, 4, 5]) / 4) == "4.3"
    assert format_average(4.15) == "4.2"
    assert format_average(5) == "5.0"
    assert format_average(3.0 + 2 / 3) == "3.7"
    assert format_average("—") == "—"


def test_student_subject_averages():
    rows = student_subject_averages(GRADES, [1, 2, 3])
    assert rows[1] == {"1": "4.5", "2": "3.0", "overall": "4.0"}
    assert rows[2] == {"1": "3.0", "overall": "3.0"}
    assert rows[3] == {"overall": "—"}


def test_missing_attendance_counts_as_present():
    records = [
        SimpleNamespace(student_id=1, schedule_id=10, status="absent"),
        SimpleNamespace(student_id=2, schedule_id=10, status="present"),
    ]
    assert not is_present(1, 10, records)
    assert is_present(2, 10, records)
    assert is_present(3, 10, records)
    assert is_present(1, 11, records)
    assert attendance_sheet([1, 2, 3], 10, records) == {1: False, 2: True, 3: True}

import pytest

from ejournal.db.models import UserRoleEnum as R
from ejournal.services.role_access import MENU_ITEMS, ROLE_ACCESS, role_allows, visible_items


def menu_ids(role):
    return [item.id for item in visible_items(role)]


def test_every_role_has_a_menu():
    assert set(ROLE_ACCESS) == set(R)
    known = {item.id for item in MENU_ITEMS}
    for allowed in ROLE_ACCESS.values():
        assert allowed <= known


def test_items_keep_menu_order():
    assert menu_ids(R.SUPER_ADMIN) == [
        "dashboard", "schools", "users", "user-roles", "analytics",
        "messages", "notifications", "settings", "support",
    ]
    assert menu_ids(R.PRINCIPAL) == [
        "dashboard", "users", "schedule", "grades", "messages",
        "documents", "analytics", "settings", "support",
    ]
    assert menu_ids(R.PRINCIPAL) == menu_ids(R.VICE_PRINCIPAL)


def test_class_teacher_sees_grades_but_teacher_does_not():
    assert "grades" in menu_ids(R.CLASS_TEACHER)
    assert "grades" not in menu_ids(R.TEACHER)
    assert menu_ids(R.PARENT) == ["dashboard", "grades", "messages", "documents", "support"]


@pytest.mark.parametrize("role", [None, "", "janitor"])
def test_unknown_role_falls_back_to_student(role):
    assert menu_ids(role) == menu_ids(R.STUDENT)


def test_role_given_as_string():
    assert menu_ids("school_admin") == menu_ids(R.SCHOOL_ADMIN)


def test_role_allows():
    teachers = (R.TEACHER, R.CLASS_TEACHER)
    assert role_allows(teachers, primary=R.STUDENT, active=R.TEACHER)
    assert role_allows(teachers, primary=R.CLASS_TEACHER)
    assert role_allows(teachers, primary=R.SUPER_ADMIN)
    assert role_allows(teachers, primary=R.PARENT, assigned=["class_teacher"])
    assert not role_allows(teachers, primary=R.PARENT, active=R.PARENT, assigned=[R.STUDENT])
    assert not role_allows(teachers, primary="janitor")


@pytest.mark.parametrize("role", list(R))
def test_filtering_is_repeatable(role):
    assert menu_ids(role) == menu_ids(role)
    assert visible_items(role) is not visible_items(role)


def test_switching_back_restores_menu():
    teacher = menu_ids(R.TEACHER)
    assert menu_ids(R.PRINCIPAL) != teacher
    assert menu_ids(R.TEACHER) == teacher

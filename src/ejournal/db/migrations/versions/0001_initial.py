"""Initial journal schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-16
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

user_role = postgresql.ENUM(
    "super_admin", "school_admin", "teacher", "student", "parent", "principal", "vice_principal", "class_teacher",
    name="user_role",
    create_type=False,
)
schedule_status = postgresql.ENUM("not_conducted", "conducted", "cancelled", name="schedule_status", create_type=False)
grade_type = postgresql.ENUM("classwork", "homework", "test", "exam", "project", name="grade_type", create_type=False)
attendance_status = postgresql.ENUM("present", "absent", name="attendance_status", create_type=False)

ENUMS = (user_role, schedule_status, grade_type, attendance_status)


def _id() -> sa.Column:
    return sa.Column("id", sa.Integer(), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _fk(column: str, target: str, ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(column, sa.Integer(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def upgrade() -> None:
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        "schools",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="active"),
        _created_at(),
    )

    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("password", sa.Text(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text()),
        sa.Column("role", user_role, nullable=False),
        sa.Column("active_role", user_role),
        _fk("school_id", "schools.id", ondelete="SET NULL", nullable=True),
        _created_at(),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "classes",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        _fk("school_id", "schools.id"),
        sa.Column("grade_level", sa.Integer(), nullable=False),
        sa.Column("academic_year", sa.String(16), nullable=False),
        _created_at(),
    )
    op.create_index("ix_classes_school_id", "classes", ["school_id"])

    op.create_table(
        "user_roles",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("role", user_role, nullable=False),
        _fk("school_id", "schools.id", nullable=True),
        _fk("class_id", "classes.id", nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.UniqueConstraint("user_id", "role", "school_id", "class_id", name="uq_user_roles_assignment"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])

    op.create_table(
        "subjects",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text()),
        _fk("school_id", "schools.id"),
    )
    op.create_index("ix_subjects_school_id", "subjects", ["school_id"])

    op.create_table(
        "teacher_subjects",
        _id(),
        _fk("teacher_id", "users.id"),
        _fk("subject_id", "subjects.id"),
        sa.UniqueConstraint("teacher_id", "subject_id", name="uq_teacher_subjects_pair"),
    )
    op.create_index("ix_teacher_subjects_teacher_id", "teacher_subjects", ["teacher_id"])

    op.create_table(
        "student_classes",
        _id(),
        _fk("student_id", "users.id"),
        _fk("class_id", "classes.id"),
        sa.UniqueConstraint("student_id", "class_id", name="uq_student_classes_pair"),
    )
    op.create_index("ix_student_classes_student_id", "student_classes", ["student_id"])
    op.create_index("ix_student_classes_class_id", "student_classes", ["class_id"])

    op.create_table(
        "subgroups",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text()),
        _fk("class_id", "classes.id"),
        _fk("school_id", "schools.id"),
        _created_at(),
    )
    op.create_index("ix_subgroups_class_id", "subgroups", ["class_id"])

    op.create_table(
        "student_subgroups",
        _id(),
        _fk("student_id", "users.id"),
        _fk("subgroup_id", "subgroups.id"),
        sa.UniqueConstraint("student_id", "subgroup_id", name="uq_student_subgroups_pair"),
    )
    op.create_index("ix_student_subgroups_student_id", "student_subgroups", ["student_id"])

    op.create_table(
        "lesson_slots",
        _id(),
        _fk("class_id", "classes.id", nullable=True),
        sa.Column("slot_number", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.UniqueConstraint("class_id", "slot_number", name="uq_lesson_slots_class_slot"),
        sa.CheckConstraint("slot_number >= 0", name="ck_lesson_slots_slot_number_non_negative"),
    )
    op.create_index(
        "ux_lesson_slots_default_slot_number",
        "lesson_slots",
        ["slot_number"],
        unique=True,
        postgresql_where=sa.text("class_id IS NULL"),
        sqlite_where=sa.text("class_id IS NULL"),
    )

    op.create_table(
        "schedules",
        _id(),
        _fk("class_id", "classes.id"),
        _fk("subject_id", "subjects.id"),
        _fk("teacher_id", "users.id"),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("schedule_date", sa.Date()),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("room", sa.Text()),
        _fk("subgroup_id", "subgroups.id", ondelete="SET NULL", nullable=True),
        sa.Column("status", schedule_status, nullable=False, server_default="not_conducted"),
        sa.CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_schedules_day_of_week_range"),
    )
    op.create_index("ix_schedules_teacher_id", "schedules", ["teacher_id"])
    op.create_index("ix_schedules_class_day", "schedules", ["class_id", "day_of_week"])

    op.create_table(
        "grades",
        _id(),
        _fk("student_id", "users.id"),
        _fk("subject_id", "subjects.id"),
        _fk("class_id", "classes.id"),
        _fk("teacher_id", "users.id"),
        _fk("schedule_id", "schedules.id", ondelete="SET NULL", nullable=True),
        sa.Column("grade", sa.Integer(), nullable=False),
        sa.Column("grade_type", grade_type, nullable=False),
        sa.Column("comment", sa.Text()),
        _created_at(),
        sa.CheckConstraint("grade BETWEEN 1 AND 5", name="ck_grades_grade_range"),
    )
    op.create_index("ix_grades_student_id", "grades", ["student_id"])
    op.create_index("ix_grades_class_subject", "grades", ["class_id", "subject_id"])

    op.create_table(
        "attendance",
        _id(),
        _fk("student_id", "users.id"),
        _fk("schedule_id", "schedules.id"),
        sa.Column("status", attendance_status, nullable=False),
        sa.Column("comment", sa.Text()),
        _created_at(),
        sa.UniqueConstraint("student_id", "schedule_id", name="uq_attendance_student_schedule"),
    )
    op.create_index("ix_attendance_schedule_id", "attendance", ["schedule_id"])

    op.create_table(
        "homework",
        _id(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        _fk("subject_id", "subjects.id"),
        _fk("class_id", "classes.id"),
        _fk("teacher_id", "users.id"),
        _fk("schedule_id", "schedules.id", ondelete="SET NULL", nullable=True),
        sa.Column("due_date", sa.Date(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_homework_class_id", "homework", ["class_id"])

    op.create_table(
        "homework_submissions",
        _id(),
        _fk("homework_id", "homework.id"),
        _fk("student_id", "users.id"),
        sa.Column("submission_text", sa.Text()),
        sa.Column("file_url", sa.Text()),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("grade", sa.Integer()),
        sa.Column("feedback", sa.Text()),
        sa.UniqueConstraint("homework_id", "student_id", name="uq_homework_submissions_pair"),
    )
    op.create_index("ix_homework_submissions_homework_id", "homework_submissions", ["homework_id"])

    op.create_table(
        "notifications",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "parent_students",
        _id(),
        _fk("parent_id", "users.id"),
        _fk("student_id", "users.id"),
        sa.UniqueConstraint("parent_id", "student_id", name="uq_parent_students_pair"),
    )
    op.create_index("ix_parent_students_parent_id", "parent_students", ["parent_id"])

    op.create_table(
        "system_logs",
        _id(),
        _fk("user_id", "users.id", ondelete="SET NULL", nullable=True),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("details", sa.Text()),
        sa.Column("ip_address", sa.String(64)),
        _created_at(),
    )
    op.create_index("ix_system_logs_user_id", "system_logs", ["user_id"])


def downgrade() -> None:
    for table in (
        "system_logs",
        "parent_students",
        "notifications",
        "homework_submissions",
        "homework",
        "attendance",
        "grades",
        "schedules",
        "lesson_slots",
        "student_subgroups",
        "subgroups",
        "student_classes",
        "teacher_subjects",
        "subjects",
        "user_roles",
        "classes",
        "users",
        "schools",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)

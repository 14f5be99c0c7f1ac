"""Reference tables managed by administrators: schools, classes, subjects, subgroups and the link tables."""
from __future__ import annotations

from ejournal.api.router_factory import build_crud_router
from ejournal.auth.deps import require_super_admin
from ejournal.db.models import (
    ParentStudent,
    School,
    SchoolClass,
    StudentClass,
    StudentSubgroup,
    Subgroup,
    Subject,
    TeacherSubject,
)
from ejournal.schemas.organization import (
    ClassIn,
    ClassOut,
    ParentStudentIn,
    ParentStudentOut,
    SchoolIn,
    SchoolOut,
    StudentClassIn,
    StudentClassOut,
    StudentSubgroupIn,
    StudentSubgroupOut,
    SubgroupIn,
    SubgroupOut,
    SubjectIn,
    SubjectOut,
    TeacherSubjectIn,
    TeacherSubjectOut,
)

ROUTERS = [
    build_crud_router(
        model=School,
        schema_in=SchoolIn,
        schema_out=SchoolOut,
        path_prefix="/api/schools",
        tags=["schools"],
        write_dependency=require_super_admin,
    ),
    build_crud_router(
        model=SchoolClass,
        schema_in=ClassIn,
        schema_out=ClassOut,
        path_prefix="/api/classes",
        tags=["classes"],
        filters=("school_id",),
        audit_name="class",
    ),
    build_crud_router(
        model=Subject,
        schema_in=SubjectIn,
        schema_out=SubjectOut,
        path_prefix="/api/subjects",
        tags=["subjects"],
        filters=("school_id",),
    ),
    build_crud_router(
        model=Subgroup,
        schema_in=SubgroupIn,
        schema_out=SubgroupOut,
        path_prefix="/api/subgroups",
        tags=["subgroups"],
        filters=("class_id", "school_id"),
    ),
    build_crud_router(
        model=StudentClass,
        schema_in=StudentClassIn,
        schema_out=StudentClassOut,
        path_prefix="/api/student-classes",
        tags=["enrollments"],
        filters=("student_id", "class_id"),
        audit_name="student_class",
    ),
    build_crud_router(
        model=StudentSubgroup,
        schema_in=StudentSubgroupIn,
        schema_out=StudentSubgroupOut,
        path_prefix="/api/student-subgroups",
        tags=["enrollments"],
        filters=("student_id", "subgroup_id"),
        audit_name="student_subgroup",
    ),
    build_crud_router(
        model=TeacherSubject,
        schema_in=TeacherSubjectIn,
        schema_out=TeacherSubjectOut,
        path_prefix="/api/teacher-subjects",
        tags=["enrollments"],
        filters=("teacher_id", "subject_id"),
        audit_name="teacher_subject",
    ),
    build_crud_router(
        model=ParentStudent,
        schema_in=ParentStudentIn,
        schema_out=ParentStudentOut,
        path_prefix="/api/parent-students",
        tags=["enrollments"],
        filters=("parent_id", "student_id"),
        audit_name="parent_student",
    ),
]

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from ejournal.schemas.base import APIModel


class SchoolIn(APIModel):
    name: str = Field(..., min_length=1)
    address: str
    city: str
    status: str = "active"


class SchoolOut(SchoolIn):
    id: int
    created_at: datetime


class ClassIn(APIModel):
    name: str = Field(..., min_length=1)
    school_id: int
    grade_level: int = Field(..., ge=1, le=12)
    academic_year: str


class ClassOut(ClassIn):
    id: int
    created_at: datetime


class SubjectIn(APIModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    school_id: int


class SubjectOut(SubjectIn):
    id: int


class SubgroupIn(APIModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    class_id: int
    school_id: int


class SubgroupOut(SubgroupIn):
    id: int
    created_at: datetime


class StudentClassIn(APIModel):
    student_id: int
    class_id: int


class StudentClassOut(StudentClassIn):
    id: int


class StudentSubgroupIn(APIModel):
    student_id: int
    subgroup_id: int


class StudentSubgroupOut(StudentSubgroupIn):
    id: int


class TeacherSubjectIn(APIModel):
    teacher_id: int
    subject_id: int


class TeacherSubjectOut(TeacherSubjectIn):
    id: int


class ParentStudentIn(APIModel):
    parent_id: int
    student_id: int


class ParentStudentOut(ParentStudentIn):
    id: int

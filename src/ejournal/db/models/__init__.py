from ejournal.db.base import Base
from .attendance import Attendance, AttendanceStatus
from .classes import SchoolClass, StudentClass
from .grades import Grade, GradeType
from .homework import Homework, HomeworkSubmission
from .lesson_slots import LessonSlot
from .notifications import Notification
from .parent_students import ParentStudent
from .schedules import Schedule, ScheduleStatus
from .schools import School
from .subgroups import StudentSubgroup, Subgroup
from .subjects import Subject, TeacherSubject
from .system_logs import SystemLog
from .users import User, UserRole, UserRoleEnum

__all__ = [
    "Base",
    "Attendance",
    "AttendanceStatus",
    "Grade",
    "GradeType",
    "Homework",
    "HomeworkSubmission",
    "LessonSlot",
    "Notification",
    "ParentStudent",
    "Schedule",
    "ScheduleStatus",
    "School",
    "SchoolClass",
    "StudentClass",
    "StudentSubgroup",
    "Subgroup",
    "Subject",
    "SystemLog",
    "TeacherSubject",
    "User",
    "UserRole",
    "UserRoleEnum",
]

from fastapi import APIRouter

from . import (
    attendance,
    auth,
    grades,
    health,
    homework,
    notifications,
    organization,
    roles,
    schedules,
    system_logs,
    time_slots,
    users,
)


def all_routers() -> list[APIRouter]:
    return [
        health.router,
        auth.router,
        users.router,
        roles.router,
        schedules.router,
        time_slots.router,
        grades.router,
        attendance.router,
        homework.router,
        notifications.router,
        system_logs.router,
        *organization.ROUTERS,
    ]

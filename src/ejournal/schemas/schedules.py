from __future__ import annotations

import datetime as dt
from datetime import date
from typing import Optional

from pydantic import Field, model_validator

from ejournal.db.models.schedules import ScheduleStatus
from ejournal.schemas.base import HHMM, APIModel


class ScheduleCreate(APIModel):
    class_id: int
    subject_id: int
    teacher_id: int
    day_of_week: Optional[int] = Field(default=None, ge=1, le=7)
    schedule_date: Optional[date] = None
    start_time: HHMM
    end_time: HHMM
    room: Optional[str] = None
    subgroup_id: Optional[int] = None
    status: ScheduleStatus = ScheduleStatus.NOT_CONDUCTED

    @model_validator(mode="after")
    def _check(self) -> "ScheduleCreate":
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        if self.schedule_date is not None:
            # a dated lesson always sits on its own weekday
            self.day_of_week = self.schedule_date.isoweekday()
        if self.day_of_week is None:
            raise ValueError("dayOfWeek or scheduleDate is required")
        return self


class ScheduleUpdate(APIModel):
    class_id: Optional[int] = None
    subject_id: Optional[int] = None
    teacher_id: Optional[int] = None
    day_of_week: Optional[int] = Field(default=None, ge=1, le=7)
    schedule_date: Optional[date] = None
    start_time: Optional[HHMM] = None
    end_time: Optional[HHMM] = None
    room: Optional[str] = None
    subgroup_id: Optional[int] = None
    status: Optional[ScheduleStatus] = None


class ScheduleStatusIn(APIModel):
    status: Optional[str] = None


class ScheduleOut(APIModel):
    id: int
    class_id: int
    subject_id: int
    teacher_id: int
    day_of_week: int
    schedule_date: Optional[date] = None
    start_time: str
    end_time: str
    room: Optional[str] = None
    subgroup_id: Optional[int] = None
    subgroup_name: Optional[str] = None
    status: ScheduleStatus


class DayOut(APIModel):
    date: dt.date
    day_of_week: int
    entries: list[ScheduleOut]


class WeekOut(APIModel):
    week_start: date
    days: list[DayOut]


class GridRowOut(APIModel):
    slot_number: int
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    label: str
    cells: list[Optional[ScheduleOut]]


class GridOut(APIModel):
    class_id: int
    days: list[date]
    rows: list[GridRowOut]

from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator

from ejournal.schemas.base import HHMM, APIModel


class TimeSlotIn(APIModel):
    slot_number: int = Field(..., ge=0)
    start_time: HHMM
    end_time: HHMM

    @model_validator(mode="after")
    def _check_order(self) -> "TimeSlotIn":
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class TimeSlotOut(APIModel):
    id: int
    slot_number: int
    start_time: str
    end_time: str
    class_id: Optional[int] = None


class EffectiveSlotOut(APIModel):
    slot_number: int
    start_time: str
    end_time: str
    is_override: bool


class ResolvedSlotOut(APIModel):
    slot_number: int
    class_id: int
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    label: str

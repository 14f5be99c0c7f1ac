from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ejournal.services.time_slots import normalize_time


class APIModel(BaseModel):
    """Base for request/response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        from_attributes=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


# "8:30", "08:30" and "08:30:00" all become "08:30"
HHMM = Annotated[str, AfterValidator(normalize_time)]


class Message(APIModel):
    message: str

# backend/barbershop/schemas/blocks.py

import re
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, field_validator, model_validator

from ..services.availability.config import MINUTES_PER_DAY, time_str_to_minutes

_TIME_RE = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")


class BlockCreate(BaseModel):
    barber_id: Optional[int] = None  # None = whole shop

    date_start: date
    date_end: date

    # Both empty = full-day block
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    kind: str = "block"  # block | vacation | day_off
    reason: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        if not _TIME_RE.match(v):
            raise ValueError("Time must be in HH:MM format")
        # 00:00..23:59, plus 24:00 as an end of day
        time_str_to_minutes(v)
        return v

    @model_validator(mode="after")
    def validate_range(self):
        if self.date_end < self.date_start:
            raise ValueError("date_end must not be before date_start")
        start = time_str_to_minutes(self.start_time) if self.start_time else 0
        end = time_str_to_minutes(self.end_time) if self.end_time else MINUTES_PER_DAY
        if start >= MINUTES_PER_DAY:
            raise ValueError("start_time must be before 24:00")
        if end <= start:
            raise ValueError("end_time must be after start_time")
        return self


class BlockRead(BaseModel):
    id: int

    barber_id: Optional[int] = None

    date_start: date
    date_end: date

    start_time: Optional[str] = None
    end_time: Optional[str] = None

    kind: str
    reason: Optional[str] = None

    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

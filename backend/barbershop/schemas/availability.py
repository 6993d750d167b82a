# backend/barbershop/schemas/availability.py
"""
Pydantic schemas for availability API.

Field names are camelCase on the wire (availableDays, slotsCount, ...).
"""

from datetime import date
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AvailableDayRead(CamelModel):
    """A day with at least one bookable start time."""
    day: int
    date: date
    slots_count: int
    first_slot: str  # "HH:MM"
    last_slot: str


class UnavailableDayRead(CamelModel):
    """A day without bookable start times."""
    day: int
    date: date
    reason: str = Field(description="past | not_working_day | blocked | no_slots")


class MonthAvailabilityResponse(CamelModel):
    """Month calendar for a barber/service pair."""
    barber_id: int
    service_id: int
    year: int
    month: int
    available_days: list[AvailableDayRead]
    unavailable_days: list[UnavailableDayRead]
    total_days: int
    working_days: list[str]
    processing_time: float = Field(description="Computation time in ms")
    cached: bool = False


class SlotRead(CamelModel):
    start_time: str  # "HH:MM"
    available: bool


class DaySlotsResponse(CamelModel):
    """Candidate start times for one day."""
    barber_id: int
    date: date
    duration_minutes: int
    slots: list[SlotRead]


class ConflictRead(CamelModel):
    start_time: str
    end_time: str
    source: str


class SlotCheckResponse(CamelModel):
    """Result of checking a single start time."""
    barber_id: int
    service_id: int
    date: date
    start_time: str
    end_time: str | None = None  # None when the service would run past midnight
    available: bool
    reason: str | None = None
    conflicts: list[ConflictRead] = []


class InvalidateResponse(CamelModel):
    barber_id: int | None = None
    service_id: int | None = None
    deleted_entries: int

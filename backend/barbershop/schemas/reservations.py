# backend/barbershop/schemas/reservations.py

import re
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ReservationCreate(BaseModel):
    """Request body for creating a reservation."""
    barber_id: int
    service_id: int
    date: date
    start_time: str = Field(description="Time in HH:MM format")
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate time format."""
        if not re.match(r"^\d{2}:\d{2}$", v):
            raise ValueError("Time must be in HH:MM format")
        return v


class ReservationRead(BaseModel):
    id: int
    barber_id: int
    service_id: int
    date: date
    start_time: str
    end_time: Optional[str] = None
    status: str
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

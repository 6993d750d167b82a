# backend/barbershop/routers/availability.py
"""
Availability API endpoints.

GET  /availability/month      - Calendar of a month for barber + service
GET  /availability/day        - Candidate start times for one day
GET  /availability/check      - Check a single start time
POST /availability/invalidate - Drop cached months (admin endpoint)

Results are advisory; POST /reservations re-checks inside its transaction.
"""

from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.availability import (
    AvailableDayRead,
    ConflictRead,
    DaySlotsResponse,
    InvalidateResponse,
    MonthAvailabilityResponse,
    SlotCheckResponse,
    SlotRead,
    UnavailableDayRead,
)
from ..services.availability import AvailabilityService, get_availability_service
from ..services.availability.config import MINUTES_PER_DAY, minutes_to_time_str, time_str_to_minutes
from ..services.availability.errors import ComputationCancelled, ScheduleNotFound


router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/month", response_model=MonthAvailabilityResponse)
def get_month_availability(
    barber_id: int | None = Query(None, alias="barberId"),
    service_id: int | None = Query(None, alias="serviceId"),
    year: int | None = None,
    month: int | None = None,
    client_id: str | None = Header(None, alias="X-Client-Id"),
    db: Session = Depends(get_db),
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Get available/unavailable days of a month."""
    if barber_id is None or service_id is None or year is None or month is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing parameters: barberId, serviceId, year, month",
        )
    if not 1 <= month <= 12:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="month must be 1..12")
    if not 1 <= year <= 9999:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="year out of range")

    try:
        result, cached = availability.get_month(
            db, barber_id, service_id, year, month, client_id=client_id,
        )
    except ScheduleNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Barber or service not found")
    except ComputationCancelled:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Request superseded")

    return MonthAvailabilityResponse(
        barber_id=result.barber_id,
        service_id=result.service_id,
        year=result.year,
        month=result.month,
        available_days=[
            AvailableDayRead(
                day=d.day,
                date=d.date,
                slots_count=d.slot_count,
                first_slot=minutes_to_time_str(d.first_slot),
                last_slot=minutes_to_time_str(d.last_slot),
            )
            for d in result.available_days
        ],
        unavailable_days=[
            UnavailableDayRead(day=d.day, date=d.date, reason=d.reason.value)
            for d in result.unavailable_days
        ],
        total_days=result.total_days,
        working_days=list(result.working_days),
        processing_time=result.processing_time_ms,
        cached=cached,
    )


@router.get("/day", response_model=DaySlotsResponse)
def get_day_slots(
    barber_id: int | None = Query(None, alias="barberId"),
    target_date: date | None = Query(None, alias="date"),
    duration_minutes: int | None = Query(None, alias="durationMinutes"),
    client_id: str | None = Header(None, alias="X-Client-Id"),
    db: Session = Depends(get_db),
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Get candidate start times for one day with an availability flag."""
    if barber_id is None or target_date is None or duration_minutes is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing parameters: barberId, date, durationMinutes",
        )
    if duration_minutes <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="durationMinutes must be positive")

    try:
        grid = availability.get_day_grid(
            db, barber_id, target_date, duration_minutes, client_id=client_id,
        )
    except ScheduleNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Barber not found")
    except ComputationCancelled:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Request superseded")

    return DaySlotsResponse(
        barber_id=barber_id,
        date=target_date,
        duration_minutes=duration_minutes,
        slots=[SlotRead(start_time=entry.start_time, available=entry.available) for entry in grid],
    )


@router.get("/check", response_model=SlotCheckResponse)
def check_slot(
    barber_id: int | None = Query(None, alias="barberId"),
    service_id: int | None = Query(None, alias="serviceId"),
    target_date: date | None = Query(None, alias="date"),
    start_time: str | None = Query(None, alias="startTime"),
    db: Session = Depends(get_db),
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Check a single start time. 200 when bookable, 409 otherwise."""
    if barber_id is None or service_id is None or target_date is None or not start_time:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing parameters: barberId, serviceId, date, startTime",
        )
    try:
        start = time_str_to_minutes(start_time)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="startTime must be HH:MM")

    try:
        result = availability.check_slot(db, barber_id, service_id, target_date, start)
    except ScheduleNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Barber or service not found")

    response = SlotCheckResponse(
        barber_id=barber_id,
        service_id=service_id,
        date=target_date,
        start_time=minutes_to_time_str(result.start),
        end_time=minutes_to_time_str(result.end) if result.end <= MINUTES_PER_DAY else None,
        available=result.available,
        reason=result.reason,
        conflicts=[
            ConflictRead(
                start_time=minutes_to_time_str(c.start),
                end_time=minutes_to_time_str(c.end),
                source=c.source,
            )
            for c in result.conflicts
        ],
    )
    if not result.available:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=response.model_dump(mode="json", by_alias=True),
        )
    return response


@router.post("/invalidate", response_model=InvalidateResponse)
def invalidate_availability_cache(
    barber_id: int | None = Query(None, alias="barberId"),
    service_id: int | None = Query(None, alias="serviceId"),
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Manually invalidate cached months (admin endpoint). No filters = everything."""
    deleted = availability.invalidate(barber_id, service_id)

    return InvalidateResponse(
        barber_id=barber_id,
        service_id=service_id,
        deleted_entries=deleted,
    )

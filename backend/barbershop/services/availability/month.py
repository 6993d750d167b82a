# backend/barbershop/services/availability/month.py
"""
Month availability calculation.

One request = one config lookup + one occupancy snapshot for the whole
month + one in-memory pass over its days. Each day is classified in a
fixed order:

  1. past             (date < today)
  2. not_working_day  (weekday not in the barber's working days)
  3. blocked          (full-day block)
  4. available / no_slots

Also hosts the single-day operations built on the same pipeline: the
day slot grid and the single start-time check.
"""

import calendar
import logging
import time
from dataclasses import replace
from datetime import date, datetime

from sqlalchemy.orm import Session

from .cancellation import CancellationToken, check_token
from .config import AvailabilityConfig, get_availability_config
from .domain import (
    AvailableDay,
    DayAvailability,
    MonthAvailability,
    ScheduleConfig,
    SlotCheck,
    SlotGridEntry,
    UnavailableDay,
    UnavailableReason,
)
from .generator import build_day_grid, conflicting_intervals, generate_slots, lead_time_floor
from .indexer import OccupancyIndex, index_occupancy
from .resolver import resolve_barber_schedule, resolve_schedule

logger = logging.getLogger(__name__)


def month_range(year: int, month: int) -> tuple[date, date]:
    """First and last date of a month. Raises ValueError for an invalid month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")
    if not 1 <= year <= 9999:
        raise ValueError(f"year out of range: {year}")
    days_in_month = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, days_in_month)


def compute_month(
    db: Session,
    barber_id: int,
    service_id: int,
    year: int,
    month: int,
    now: datetime | None = None,
    token: CancellationToken | None = None,
    config: AvailabilityConfig | None = None,
) -> MonthAvailability:
    """
    Compute availability for every day of a month.

    Raises:
        ValueError: invalid year/month
        ScheduleNotFound: barber/service combination cannot be resolved
        ScheduleDataError / OccupancyDataError: unusable stored data
        ComputationCancelled: token was cancelled between stages
    """
    config = config or get_availability_config()
    now = now or datetime.now()
    started = time.perf_counter()

    first_day, last_day = month_range(year, month)

    schedule = resolve_schedule(db, barber_id, service_id, token)
    index = index_occupancy(db, barber_id, first_day, last_day, token)

    result = compute_month_from(schedule, index, year, month, now, config, token)

    processing_time_ms = round((time.perf_counter() - started) * 1000, 2)
    result = replace(result, processing_time_ms=processing_time_ms)

    logger.info(
        f"Month availability barber={barber_id} service={service_id} {year}-{month:02d}: "
        f"{len(result.available_days)} available, {len(result.unavailable_days)} unavailable, "
        f"{processing_time_ms}ms"
    )
    return result


def compute_month_from(
    schedule: ScheduleConfig,
    index: OccupancyIndex,
    year: int,
    month: int,
    now: datetime,
    config: AvailabilityConfig,
    token: CancellationToken | None = None,
) -> MonthAvailability:
    """Pure part of compute_month: no database access."""
    first_day, last_day = month_range(year, month)

    days: list[DayAvailability] = []
    for day_number in range(first_day.day, last_day.day + 1):
        check_token(token)
        dt = date(year, month, day_number)
        days.append(classify_day(dt, schedule, index, now, config))

    return MonthAvailability(
        barber_id=schedule.barber_id,
        service_id=schedule.service_id,
        year=year,
        month=month,
        days=tuple(days),
        working_days=tuple(schedule.working_day_names),
    )


def classify_day(
    dt: date,
    schedule: ScheduleConfig,
    index: OccupancyIndex,
    now: datetime,
    config: AvailabilityConfig,
) -> DayAvailability:
    """Classify one date. The order of checks is part of the contract."""
    floor = lead_time_floor(dt, now, config.lead_time_minutes)
    if floor is None:
        return UnavailableDay(dt, UnavailableReason.PAST)

    if not schedule.works_on(dt):
        return UnavailableDay(dt, UnavailableReason.NOT_WORKING_DAY)

    if index.has_full_day_block(dt):
        return UnavailableDay(dt, UnavailableReason.BLOCKED)

    slots = generate_slots(dt, schedule, index.for_date(dt), floor, config.slot_step_minutes)
    if not slots:
        return UnavailableDay(dt, UnavailableReason.NO_SLOTS)

    return AvailableDay(
        date=dt,
        slot_count=len(slots),
        first_slot=slots[0],
        last_slot=slots[-1],
    )


def compute_day_grid(
    db: Session,
    barber_id: int,
    target_date: date,
    duration_minutes: int,
    now: datetime | None = None,
    token: CancellationToken | None = None,
    config: AvailabilityConfig | None = None,
) -> list[SlotGridEntry]:
    """
    Candidate start times for one date with an availability flag.

    Non-working days have no working window and return an empty grid;
    past or fully blocked days return the grid with every entry unavailable.
    """
    config = config or get_availability_config()
    now = now or datetime.now()

    schedule = resolve_barber_schedule(db, barber_id, duration_minutes, token)
    if not schedule.works_on(target_date):
        return []

    index = index_occupancy(db, barber_id, target_date, target_date, token)
    floor = lead_time_floor(target_date, now, config.lead_time_minutes)
    return build_day_grid(
        target_date,
        schedule,
        index.for_date(target_date),
        floor,
        config.slot_step_minutes,
    )


def check_slot(
    db: Session,
    barber_id: int,
    service_id: int,
    target_date: date,
    start: int,
    now: datetime | None = None,
    config: AvailabilityConfig | None = None,
) -> SlotCheck:
    """
    Check whether a single start time is bookable.

    The reason is the first failing rule: past, not_working_day,
    outside_working_hours, lead_time, blocked, conflict.
    """
    config = config or get_availability_config()
    now = now or datetime.now()

    schedule = resolve_schedule(db, barber_id, service_id)
    end = start + schedule.duration

    def unavailable(reason: str, conflicts=()) -> SlotCheck:
        return SlotCheck(target_date, start, end, False, reason, tuple(conflicts))

    floor = lead_time_floor(target_date, now, config.lead_time_minutes)
    if floor is None:
        return unavailable(UnavailableReason.PAST.value)
    if not schedule.works_on(target_date):
        return unavailable(UnavailableReason.NOT_WORKING_DAY.value)
    if start < schedule.work_start or end > schedule.work_end:
        return unavailable("outside_working_hours")
    if start < floor:
        return unavailable("lead_time")

    index = index_occupancy(db, barber_id, target_date, target_date)
    if index.has_full_day_block(target_date):
        return unavailable(UnavailableReason.BLOCKED.value)

    conflicts = conflicting_intervals(index.for_date(target_date), start, end)
    if conflicts:
        return unavailable("conflict", conflicts)

    return SlotCheck(target_date, start, end, True)

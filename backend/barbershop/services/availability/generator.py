# backend/barbershop/services/availability/generator.py
"""
Slot generation for a single date.

Occupancy is a 1440-entry minute array: every busy interval marks
[start, end) and a candidate is valid only if all minutes it would use
are free. Cost is O(1440) per day regardless of how many intervals
overlap or touch.

Candidates start at max(work_start, min_allowed_start) and advance by
the step (15 min) while start + duration <= work_end.
"""

from datetime import date, datetime
from typing import Iterable

from .config import MINUTES_PER_DAY
from .domain import OccupiedInterval, ScheduleConfig, SlotGridEntry

DEFAULT_STEP_MINUTES = 15


def build_occupancy(intervals: Iterable[OccupiedInterval]) -> bytearray:
    """Minute array: 1 = occupied, 0 = free."""
    occupied = bytearray(MINUTES_PER_DAY)
    for interval in intervals:
        start = max(interval.start, 0)
        end = min(interval.end, MINUTES_PER_DAY)
        if end > start:
            occupied[start:end] = b"\x01" * (end - start)
    return occupied


def is_range_free(occupied: bytearray, start: int, end: int) -> bool:
    """True if no minute in [start, end) is occupied."""
    return not any(occupied[start:end])


def generate_slots(
    target_date: date,
    config: ScheduleConfig,
    intervals: Iterable[OccupiedInterval],
    min_allowed_start: int,
    step: int = DEFAULT_STEP_MINUTES,
) -> list[int]:
    """
    Legal start times (minute-of-day, ascending) for `target_date`.

    Returns an empty list when any interval is a full-day block.
    `min_allowed_start` is 0 for future dates and now + lead time for
    today (see lead_time_floor); it is decided by the caller.
    """
    intervals = list(intervals)
    if any(interval.full_day for interval in intervals):
        return []

    occupied = build_occupancy(intervals)
    duration = config.duration

    slots: list[int] = []
    start = max(config.work_start, min_allowed_start)
    while start + duration <= config.work_end:
        if is_range_free(occupied, start, start + duration):
            slots.append(start)
        start += step
    return slots


def build_day_grid(
    target_date: date,
    config: ScheduleConfig,
    intervals: Iterable[OccupiedInterval],
    min_allowed_start: int | None,
    step: int = DEFAULT_STEP_MINUTES,
) -> list[SlotGridEntry]:
    """
    Every candidate start in the working window, flagged available or not.

    Candidates are taken from work_start regardless of lead time so the
    grid is stable through the day; `min_allowed_start=None` (past date)
    marks every entry unavailable.
    """
    intervals = list(intervals)
    full_day = any(interval.full_day for interval in intervals)
    occupied = build_occupancy(intervals)
    duration = config.duration

    grid: list[SlotGridEntry] = []
    start = config.work_start
    while start + duration <= config.work_end:
        available = (
            not full_day
            and min_allowed_start is not None
            and start >= min_allowed_start
            and is_range_free(occupied, start, start + duration)
        )
        grid.append(SlotGridEntry(start=start, available=available))
        start += step
    return grid


def lead_time_floor(target_date: date, now: datetime, lead_time_minutes: int = 120) -> int | None:
    """
    Earliest allowed start minute for `target_date`.

    - future date → 0
    - today       → now (minutes) + lead time; may exceed the day
    - past date   → None
    """
    today = now.date()
    if target_date < today:
        return None
    if target_date > today:
        return 0
    return now.hour * 60 + now.minute + lead_time_minutes


def conflicting_intervals(
    intervals: Iterable[OccupiedInterval],
    start: int,
    end: int,
) -> list[OccupiedInterval]:
    """Intervals overlapping [start, end)."""
    return [interval for interval in intervals if interval.overlaps(start, end)]

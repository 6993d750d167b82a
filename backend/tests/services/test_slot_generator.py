# backend/tests/services/test_slot_generator.py

from datetime import date, datetime

import pytest

from barbershop.services.availability.config import minutes_to_time_str, time_str_to_minutes
from barbershop.services.availability.domain import OccupiedInterval, ScheduleConfig, Weekday
from barbershop.services.availability.generator import (
    build_day_grid,
    build_occupancy,
    generate_slots,
    lead_time_floor,
)

TUESDAY = date(2026, 3, 17)


def _schedule(start="09:00", end="18:00", duration=40):
    return ScheduleConfig(
        barber_id=1,
        service_id=1,
        working_days=frozenset(Weekday(i) for i in range(1, 7)),
        work_start=time_str_to_minutes(start),
        work_end=time_str_to_minutes(end),
        duration=duration,
    )


def _times(slots):
    return [minutes_to_time_str(s) for s in slots]


def test_free_day_starts_at_opening_and_steps_by_15():
    slots = generate_slots(TUESDAY, _schedule(), [], 0)

    assert _times(slots)[0] == "09:00"
    assert all(b - a == 15 for a, b in zip(slots, slots[1:]))
    # last start must still end by 18:00
    assert _times(slots)[-1] == "17:15"
    assert slots[-1] + 40 <= 18 * 60
    assert len(slots) == 34


def test_reservation_excludes_overlapping_starts():
    busy = [OccupiedInterval(13 * 60, 13 * 60 + 40)]
    times = _times(generate_slots(TUESDAY, _schedule(), busy, 0))

    for excluded in ("12:30", "12:45", "13:00", "13:15", "13:30"):
        assert excluded not in times
    assert "12:15" in times  # ends exactly at 12:55
    assert "13:45" in times  # starts after 13:40
    assert len(times) == 29


def test_adjacent_intervals_leave_exact_gap_usable():
    busy = [
        OccupiedInterval(10 * 60, 11 * 60),
        OccupiedInterval(11 * 60 + 40, 12 * 60),
    ]
    times = _times(generate_slots(TUESDAY, _schedule(), busy, 0))

    assert "11:00" in times  # 11:00-11:40 fits exactly
    assert "10:45" not in times
    assert "11:15" not in times


def test_overlapping_intervals_are_handled():
    busy = [
        OccupiedInterval(10 * 60, 11 * 60),
        OccupiedInterval(10 * 60 + 30, 12 * 60),
        OccupiedInterval(10 * 60 + 45, 10 * 60 + 50),
    ]
    slots = generate_slots(TUESDAY, _schedule(), busy, 0)

    for s in slots:
        assert not any(i.overlaps(s, s + 40) for i in busy)
    assert "12:00" in _times(slots)


def test_full_day_block_returns_no_slots_even_with_free_schedule():
    busy = [OccupiedInterval.whole_day()]
    assert generate_slots(TUESDAY, _schedule(), busy, 0) == []


def test_min_allowed_start_sets_first_candidate():
    slots = generate_slots(TUESDAY, _schedule(duration=30), [], 12 * 60)
    assert _times(slots)[0] == "12:00"


def test_min_allowed_start_off_grid_is_kept_as_is():
    # 10:07 + 120 = 12:07; candidates continue from there every 15 minutes
    slots = generate_slots(TUESDAY, _schedule(duration=30), [], 12 * 60 + 7)
    assert _times(slots)[:2] == ["12:07", "12:22"]


def test_lead_time_past_closing_gives_no_slots():
    # Today at 16:30, open until 18:00, 30 min service: floor is 18:30
    now = datetime(2026, 3, 17, 16, 30)
    floor = lead_time_floor(TUESDAY, now, 120)

    assert floor == 18 * 60 + 30
    assert generate_slots(TUESDAY, _schedule(duration=30), [], floor) == []


def test_duration_longer_than_window_gives_no_slots():
    assert generate_slots(TUESDAY, _schedule(start="09:00", end="09:30", duration=40), [], 0) == []


@pytest.mark.parametrize("duration", [15, 25, 40, 60, 90])
def test_slots_stay_inside_working_hours(duration):
    schedule = _schedule(start="10:00", end="14:00", duration=duration)
    busy = [OccupiedInterval(11 * 60, 11 * 60 + 20)]

    for s in generate_slots(TUESDAY, schedule, busy, 0):
        assert s >= schedule.work_start
        assert s + duration <= schedule.work_end
        assert not busy[0].overlaps(s, s + duration)


def test_lead_time_floor_by_date():
    now = datetime(2026, 3, 10, 10, 0)

    assert lead_time_floor(date(2026, 3, 9), now) is None
    assert lead_time_floor(date(2026, 3, 10), now) == 12 * 60
    assert lead_time_floor(date(2026, 3, 11), now) == 0


def test_build_occupancy_marks_half_open_ranges():
    occupied = build_occupancy([OccupiedInterval(600, 660)])

    assert occupied[599] == 0
    assert occupied[600] == 1
    assert occupied[659] == 1
    assert occupied[660] == 0


def test_day_grid_flags_each_candidate():
    busy = [OccupiedInterval(13 * 60, 13 * 60 + 40)]
    grid = build_day_grid(TUESDAY, _schedule(), busy, 0)
    by_time = {entry.start_time: entry.available for entry in grid}

    assert len(grid) == 34
    assert by_time["09:00"] is True
    assert by_time["12:45"] is False
    assert by_time["13:45"] is True


def test_day_grid_applies_lead_time_without_shifting_the_grid():
    grid = build_day_grid(TUESDAY, _schedule(duration=30), [], 12 * 60)

    assert grid[0].start_time == "09:00"
    assert grid[0].available is False
    assert next(e for e in grid if e.available).start_time == "12:00"


def test_day_grid_past_or_blocked_is_all_unavailable():
    assert not any(e.available for e in build_day_grid(TUESDAY, _schedule(), [], None))
    blocked = build_day_grid(TUESDAY, _schedule(), [OccupiedInterval.whole_day()], 0)
    assert blocked and not any(e.available for e in blocked)

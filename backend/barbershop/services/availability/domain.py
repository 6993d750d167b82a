# backend/barbershop/services/availability/domain.py
"""
Value types shared by the availability engine.

All types are frozen: a computed month is never mutated after
construction, so it can be cached and shared between requests.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import Union

from .config import MINUTES_PER_DAY, minutes_to_time_str


class Weekday(IntEnum):
    """Canonical weekday, Sunday first (Sun=0 .. Sat=6)."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def of(cls, dt: date) -> "Weekday":
        # date.weekday() is Monday=0
        return cls((dt.weekday() + 1) % 7)

    @property
    def spanish_name(self) -> str:
        return SPANISH_DAY_NAMES[self.value]


SPANISH_DAY_NAMES = (
    "domingo", "lunes", "martes", "miércoles", "jueves", "viernes", "sábado",
)


class UnavailableReason(str, Enum):
    PAST = "past"
    NOT_WORKING_DAY = "not_working_day"
    BLOCKED = "blocked"
    NO_SLOTS = "no_slots"


@dataclass(frozen=True)
class ScheduleConfig:
    barber_id: int
    service_id: int | None  # None when resolved for an explicit duration
    working_days: frozenset[Weekday]
    work_start: int  # minute-of-day
    work_end: int
    duration: int    # minutes

    def __post_init__(self):
        if not 0 <= self.work_start < self.work_end <= MINUTES_PER_DAY:
            raise ValueError(
                f"working hours must satisfy 0 <= start < end <= {MINUTES_PER_DAY}, "
                f"got {self.work_start}-{self.work_end}"
            )
        if self.duration <= 0:
            raise ValueError(f"duration must be positive, got {self.duration}")

    def works_on(self, dt: date) -> bool:
        return Weekday.of(dt) in self.working_days

    @property
    def working_day_names(self) -> list[str]:
        return [day.spanish_name for day in sorted(self.working_days)]


@dataclass(frozen=True)
class OccupiedInterval:
    """
    Busy range [start, end) on one date, in minutes.

    A full-day interval always spans the whole day and disables the
    date regardless of whether a service would otherwise fit.
    """
    start: int
    end: int
    source: str = "reservation"  # "reservation" | "block"
    full_day: bool = False
    ref_id: int | None = None

    def __post_init__(self):
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise ValueError(f"invalid interval {self.start}-{self.end}")

    def overlaps(self, start: int, end: int) -> bool:
        return self.start < end and start < self.end

    @classmethod
    def whole_day(cls, source: str = "block", ref_id: int | None = None) -> "OccupiedInterval":
        return cls(0, MINUTES_PER_DAY, source=source, full_day=True, ref_id=ref_id)


@dataclass(frozen=True)
class AvailableDay:
    date: date
    slot_count: int
    first_slot: int
    last_slot: int

    available = True

    @property
    def day(self) -> int:
        return self.date.day


@dataclass(frozen=True)
class UnavailableDay:
    date: date
    reason: UnavailableReason

    available = False

    @property
    def day(self) -> int:
        return self.date.day


DayAvailability = Union[AvailableDay, UnavailableDay]


@dataclass(frozen=True)
class MonthKey:
    barber_id: int
    service_id: int
    year: int
    month: int

    def __str__(self) -> str:
        return f"{self.barber_id}:{self.service_id}:{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class MonthAvailability:
    barber_id: int
    service_id: int
    year: int
    month: int
    days: tuple[DayAvailability, ...]
    working_days: tuple[str, ...]
    # Timing is a measurement, not part of the result's identity
    processing_time_ms: float = field(default=0.0, compare=False)

    @property
    def key(self) -> MonthKey:
        return MonthKey(self.barber_id, self.service_id, self.year, self.month)

    @property
    def total_days(self) -> int:
        return len(self.days)

    @property
    def available_days(self) -> list[AvailableDay]:
        return [d for d in self.days if isinstance(d, AvailableDay)]

    @property
    def unavailable_days(self) -> list[UnavailableDay]:
        return [d for d in self.days if isinstance(d, UnavailableDay)]

    def day(self, day_number: int) -> DayAvailability:
        return self.days[day_number - 1]


@dataclass(frozen=True)
class SlotGridEntry:
    start: int
    available: bool

    @property
    def start_time(self) -> str:
        return minutes_to_time_str(self.start)


@dataclass(frozen=True)
class SlotCheck:
    """Result of checking a single start time."""
    date: date
    start: int
    end: int
    available: bool
    reason: str | None = None
    conflicts: tuple[OccupiedInterval, ...] = ()

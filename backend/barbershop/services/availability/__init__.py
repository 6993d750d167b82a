# backend/barbershop/services/availability/__init__.py
"""
Availability calculation module.

Pipeline: resolve schedule → index occupancy → classify days / generate slots
Results are cached per (barber, service, year, month) in process, and
optionally in Redis.
"""

from .config import AvailabilityConfig, get_availability_config
from .domain import (
    AvailableDay,
    MonthAvailability,
    MonthKey,
    OccupiedInterval,
    ScheduleConfig,
    SlotCheck,
    SlotGridEntry,
    UnavailableDay,
    UnavailableReason,
    Weekday,
)
from .errors import (
    AvailabilityError,
    ComputationCancelled,
    OccupancyDataError,
    ScheduleDataError,
    ScheduleNotFound,
    SlotConflictError,
)
from .cancellation import CancellationToken, SupersedeRegistry
from .resolver import resolve_schedule, parse_working_days
from .indexer import OccupancyIndex, index_occupancy
from .generator import generate_slots, build_day_grid, lead_time_floor
from .month import compute_month, compute_day_grid, check_slot
from .cache import AvailabilityCache
from .redis_store import MonthRedisStore
from .service import AvailabilityService, get_availability_service

__all__ = [
    "AvailabilityConfig",
    "get_availability_config",
    "AvailableDay",
    "MonthAvailability",
    "MonthKey",
    "OccupiedInterval",
    "ScheduleConfig",
    "SlotCheck",
    "SlotGridEntry",
    "UnavailableDay",
    "UnavailableReason",
    "Weekday",
    "AvailabilityError",
    "ComputationCancelled",
    "OccupancyDataError",
    "ScheduleDataError",
    "ScheduleNotFound",
    "SlotConflictError",
    "CancellationToken",
    "SupersedeRegistry",
    "resolve_schedule",
    "parse_working_days",
    "OccupancyIndex",
    "index_occupancy",
    "generate_slots",
    "build_day_grid",
    "lead_time_floor",
    "compute_month",
    "compute_day_grid",
    "check_slot",
    "AvailabilityCache",
    "MonthRedisStore",
    "AvailabilityService",
    "get_availability_service",
]

# backend/barbershop/services/availability/config.py
"""
Availability engine configuration and time helpers.
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings


MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class AvailabilityConfig:
    """
    Configuration for availability calculation.

    Attributes:
        slot_step_minutes: Distance between candidate start times (15)
        lead_time_minutes: Minimum notice for bookings on the current date (120)
        cache_ttl_seconds: Lifetime of a cached month result
    """
    slot_step_minutes: int = 15
    lead_time_minutes: int = 120
    cache_ttl_seconds: int = 300

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (5, 10, 15, 20, 30, 60):
            raise ValueError(f"slot_step_minutes must divide an hour, got {self.slot_step_minutes}")
        if self.lead_time_minutes < 0:
            raise ValueError(f"lead_time_minutes must be >= 0, got {self.lead_time_minutes}")
        if self.cache_ttl_seconds <= 0:
            raise ValueError(f"cache_ttl_seconds must be > 0, got {self.cache_ttl_seconds}")


@lru_cache
def get_availability_config() -> AvailabilityConfig:
    """Get availability configuration (singleton built from settings)."""
    return AvailabilityConfig(
        slot_step_minutes=settings.slot_step_minutes,
        lead_time_minutes=settings.lead_time_minutes,
        cache_ttl_seconds=settings.cache_ttl_seconds,
    )


def time_str_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" or "HH:MM:SS" to minute-of-day.

    Seconds are dropped, so "23:59:59" → 1439.
    Raises ValueError on malformed input.
    """
    if not isinstance(value, str):
        raise ValueError(f"time must be a string, got {value!r}")
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"invalid time: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if len(parts) == 3:
        second = int(parts[2])
        if not 0 <= second <= 59:
            raise ValueError(f"invalid time: {value!r}")
    if hour == 24 and minute == 0:
        return MINUTES_PER_DAY
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"invalid time: {value!r}")
    return hour * 60 + minute


def minutes_to_time_str(minutes: int) -> str:
    """Convert minute-of-day to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"

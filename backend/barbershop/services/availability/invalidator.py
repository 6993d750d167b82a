# backend/barbershop/services/availability/invalidator.py
"""
Cache invalidation for month availability.

Triggers:
✓ Block created/deleted → barber's affected months (all barbers for shop-wide blocks)
✓ Reservation created/cancelled → barber's month of the reservation
✓ Barber or service settings changed → every cached month (caller decides)
"""

import logging
from datetime import date, timedelta

from redis.exceptions import RedisError

from .cache import AvailabilityCache, matches
from .domain import MonthKey
from .redis_store import MonthRedisStore

logger = logging.getLogger(__name__)


def invalidate_months(
    cache: AvailabilityCache,
    redis_store: MonthRedisStore | None = None,
    barber_id: int | None = None,
    service_id: int | None = None,
    months: set[tuple[int, int]] | None = None,
) -> int:
    """
    Invalidate cached months.

    Args:
        cache: In-process cache
        redis_store: Optional shared store
        barber_id: Only this barber (None = all barbers)
        service_id: Only this service (None = all services)
        months: Only these (year, month) pairs (None = all months)

    Returns:
        Number of in-process entries removed
    """
    base = matches(barber_id, service_id)

    if months is None:
        predicate = base
    else:
        def predicate(key: MonthKey) -> bool:
            if (key.year, key.month) not in months:
                return False
            return base is None or base(key)

    removed = cache.invalidate(predicate)

    if redis_store is not None:
        try:
            # Redis keys are dropped for every month of the barber/service
            redis_store.delete(barber_id, service_id)
        except RedisError:
            logger.exception(f"Failed to invalidate redis availability for barber={barber_id}")

    return removed


def get_affected_months(date_start: date, date_end: date) -> set[tuple[int, int]]:
    """
    (year, month) pairs touched by [date_start, date_end].

    Args:
        date_start: Start date (inclusive)
        date_end: End date (inclusive)
    """
    if date_start > date_end:
        date_start, date_end = date_end, date_start

    months = set()
    current = date_start.replace(day=1)
    while current <= date_end:
        months.add((current.year, current.month))
        # First day of next month
        current = (current + timedelta(days=32)).replace(day=1)
    return months

# backend/barbershop/services/availability/service.py
"""
Request-serving facade for the availability engine.

Owns the shared state of the subsystem (in-process cache, optional
Redis store, supersede registry). Everything below it is stateless.
"""

import logging
from datetime import date, datetime
from functools import lru_cache
from typing import Callable

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from .cache import AvailabilityCache
from .cancellation import SupersedeRegistry, check_token
from .config import AvailabilityConfig, get_availability_config
from .domain import MonthAvailability, MonthKey, SlotCheck, SlotGridEntry
from .invalidator import get_affected_months, invalidate_months
from .month import check_slot, compute_day_grid, compute_month, month_range
from .redis_store import MonthRedisStore

logger = logging.getLogger(__name__)


class AvailabilityService:

    def __init__(
        self,
        cache: AvailabilityCache | None = None,
        redis_store: MonthRedisStore | None = None,
        config: AvailabilityConfig | None = None,
        registry: SupersedeRegistry | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.config = config or get_availability_config()
        self._now = now
        self.cache = cache or AvailabilityCache(
            ttl_seconds=self.config.cache_ttl_seconds,
            today=lambda: self._now().date(),
        )
        self.redis_store = redis_store
        self.registry = registry or SupersedeRegistry()

    def get_month(
        self,
        db: Session,
        barber_id: int,
        service_id: int,
        year: int,
        month: int,
        client_id: str | None = None,
    ) -> tuple[MonthAvailability, bool]:
        """
        Month availability, served from cache when possible.

        Returns:
            (result, cached)
        """
        month_range(year, month)  # validate before touching shared state
        key = MonthKey(barber_id, service_id, year, month)
        token = self.registry.begin(client_id)
        computed_on: list[date] = []

        def compute() -> MonthAvailability:
            now = self._now()
            stored = self._load_shared(key, now.date())
            if stored is not None:
                return stored
            result = compute_month(
                db, barber_id, service_id, year, month,
                now=now, token=token, config=self.config,
            )
            # A superseded computation must not be published
            check_token(token)
            computed_on.append(now.date())
            return result

        def store_shared(result: MonthAvailability) -> None:
            # Results read back from redis are not written again
            if computed_on:
                self._store_shared(result, computed_on[0])

        try:
            return self.cache.get_or_compute(key, compute, token, on_store=store_shared)
        finally:
            self.registry.finish(client_id, token)

    def get_day_grid(
        self,
        db: Session,
        barber_id: int,
        target_date: date,
        duration_minutes: int,
        client_id: str | None = None,
    ) -> list[SlotGridEntry]:
        token = self.registry.begin(client_id)
        try:
            return compute_day_grid(
                db, barber_id, target_date, duration_minutes,
                now=self._now(), token=token, config=self.config,
            )
        finally:
            self.registry.finish(client_id, token)

    def check_slot(
        self,
        db: Session,
        barber_id: int,
        service_id: int,
        target_date: date,
        start: int,
    ) -> SlotCheck:
        return check_slot(
            db, barber_id, service_id, target_date, start,
            now=self._now(), config=self.config,
        )

    def invalidate(
        self,
        barber_id: int | None = None,
        service_id: int | None = None,
    ) -> int:
        return invalidate_months(self.cache, self.redis_store, barber_id, service_id)

    def invalidate_dates(
        self,
        barber_id: int | None,
        date_start: date,
        date_end: date,
    ) -> int:
        """Invalidate the months touched by a date range (barber_id None = every barber)."""
        months = get_affected_months(date_start, date_end)
        return invalidate_months(self.cache, self.redis_store, barber_id, months=months)

    # ── Shared (Redis) tier ──────────────────────────────────────────────

    def _load_shared(self, key: MonthKey, today: date) -> MonthAvailability | None:
        if self.redis_store is None:
            return None
        try:
            return self.redis_store.load(key, today)
        except (RedisError, ValueError, KeyError):
            logger.exception(f"Failed to read availability {key} from redis")
            return None

    def _store_shared(self, result: MonthAvailability, today: date) -> None:
        if self.redis_store is None:
            return
        try:
            self.redis_store.store(result, today)
        except RedisError:
            logger.exception(f"Failed to store availability {result.key} in redis")


@lru_cache
def get_availability_service() -> AvailabilityService:
    """Process-wide service instance (FastAPI dependency)."""
    from ...redis_client import redis_client

    config = get_availability_config()
    redis_store = MonthRedisStore(redis_client, config) if redis_client is not None else None
    return AvailabilityService(redis_store=redis_store, config=config)

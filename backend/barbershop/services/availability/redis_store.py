# backend/barbershop/services/availability/redis_store.py
"""
Redis storage for computed month availability.

Key format: availability:month:{barber_id}:{service_id}:{YYYY-MM}
Value: JSON-serialized MonthAvailability plus the date it was computed on.
TTL: cache_ttl_seconds; entries computed on another day are ignored.

Shares results between worker processes; the in-process
AvailabilityCache stays in front of it.
"""

import json
from datetime import date

from redis import Redis

from .config import AvailabilityConfig, get_availability_config
from .domain import (
    AvailableDay,
    MonthAvailability,
    MonthKey,
    UnavailableDay,
    UnavailableReason,
)


class MonthRedisStore:
    """Redis wrapper storing one JSON document per month key."""

    KEY_PREFIX = "availability:month"

    def __init__(self, redis: Redis, config: AvailabilityConfig | None = None):
        self.redis = redis
        self.config = config or get_availability_config()

    def _key(self, key: MonthKey) -> str:
        return f"{self.KEY_PREFIX}:{key.barber_id}:{key.service_id}:{key.year:04d}-{key.month:02d}"

    # ── Write ────────────────────────────────────────────────────────────

    def store(self, result: MonthAvailability, computed_on: date) -> None:
        payload = dump_month(result)
        payload["computed_on"] = computed_on.isoformat()
        self.redis.set(
            self._key(result.key),
            json.dumps(payload),
            ex=self.config.cache_ttl_seconds,
        )

    # ── Read ─────────────────────────────────────────────────────────────

    def load(self, key: MonthKey, today: date) -> MonthAvailability | None:
        """
        Get a stored month.

        Returns:
            MonthAvailability, or None on miss or when computed on another day.
        """
        raw = self.redis.get(self._key(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        payload = json.loads(raw)
        if payload.get("computed_on") != today.isoformat():
            return None
        return load_month(payload)

    # ── Delete ───────────────────────────────────────────────────────────

    def delete(
        self,
        barber_id: int | None = None,
        service_id: int | None = None,
    ) -> int:
        """
        Delete stored months for a barber and/or service (all when both None).

        Returns:
            Number of deleted keys.
        """
        barber_part = "*" if barber_id is None else str(barber_id)
        service_part = "*" if service_id is None else str(service_id)
        pattern = f"{self.KEY_PREFIX}:{barber_part}:{service_part}:*"

        keys = list(self.redis.scan_iter(match=pattern))
        if not keys:
            return 0
        return self.redis.delete(*keys)


# ── Serialization ────────────────────────────────────────────────────────


def dump_month(result: MonthAvailability) -> dict:
    days = []
    for day in result.days:
        if isinstance(day, AvailableDay):
            days.append({
                "date": day.date.isoformat(),
                "slot_count": day.slot_count,
                "first_slot": day.first_slot,
                "last_slot": day.last_slot,
            })
        else:
            days.append({
                "date": day.date.isoformat(),
                "reason": day.reason.value,
            })
    return {
        "barber_id": result.barber_id,
        "service_id": result.service_id,
        "year": result.year,
        "month": result.month,
        "days": days,
        "working_days": list(result.working_days),
        "processing_time_ms": result.processing_time_ms,
    }


def load_month(payload: dict) -> MonthAvailability:
    days = []
    for item in payload["days"]:
        dt = date.fromisoformat(item["date"])
        if "reason" in item:
            days.append(UnavailableDay(dt, UnavailableReason(item["reason"])))
        else:
            days.append(AvailableDay(
                date=dt,
                slot_count=item["slot_count"],
                first_slot=item["first_slot"],
                last_slot=item["last_slot"],
            ))
    return MonthAvailability(
        barber_id=payload["barber_id"],
        service_id=payload["service_id"],
        year=payload["year"],
        month=payload["month"],
        days=tuple(days),
        working_days=tuple(payload["working_days"]),
        processing_time_ms=payload.get("processing_time_ms", 0.0),
    )

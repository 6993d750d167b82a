# backend/tests/services/test_month_redis_store.py

import json
from datetime import date
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from barbershop.services.availability.config import AvailabilityConfig
from barbershop.services.availability.domain import (
    AvailableDay,
    MonthAvailability,
    MonthKey,
    UnavailableDay,
    UnavailableReason,
)
from barbershop.services.availability.redis_store import MonthRedisStore, dump_month, load_month
import barbershop.services.availability.service as service_module
from barbershop.services.availability.service import AvailabilityService

TODAY = date(2026, 3, 10)


def _result(barber_id=1, service_id=1):
    return MonthAvailability(
        barber_id=barber_id,
        service_id=service_id,
        year=2026,
        month=3,
        days=(
            UnavailableDay(date(2026, 3, 1), UnavailableReason.PAST),
            AvailableDay(date(2026, 3, 2), 12, 540, 1035),
        ),
        working_days=("lunes", "martes"),
        processing_time_ms=3.5,
    )


@pytest.fixture
def store(redis_mock):
    return MonthRedisStore(redis_mock, AvailabilityConfig(cache_ttl_seconds=120))


def test_store_uses_month_key_and_ttl(store, redis_mock):
    store.store(_result(), TODAY)

    key, value = redis_mock.set.call_args.args
    assert key == "availability:month:1:1:2026-03"
    assert redis_mock.set.call_args.kwargs == {"ex": 120}
    assert json.loads(value)["computed_on"] == "2026-03-10"


def test_load_returns_equal_result(store):
    store.store(_result(), TODAY)

    loaded = store.load(MonthKey(1, 1, 2026, 3), TODAY)

    assert loaded == _result()
    assert loaded.processing_time_ms == 3.5


def test_load_ignores_other_day_and_misses(store):
    store.store(_result(), TODAY)

    assert store.load(MonthKey(1, 1, 2026, 3), date(2026, 3, 11)) is None
    assert store.load(MonthKey(1, 2, 2026, 3), TODAY) is None


def test_delete_by_barber(store, redis_mock):
    store.store(_result(1, 1), TODAY)
    store.store(_result(1, 2), TODAY)
    store.store(_result(2, 1), TODAY)

    assert store.delete(barber_id=1) == 2
    assert list(redis_mock.data) == ["availability:month:2:1:2026-03"]
    assert store.delete(barber_id=7) == 0


def test_serialization_keeps_reasons():
    payload = dump_month(_result())

    assert payload["days"][0] == {"date": "2026-03-01", "reason": "past"}
    assert load_month(payload).day(1).reason is UnavailableReason.PAST


def test_service_reads_shared_tier_before_computing(store, db, config, clock):
    store.store(_result(), clock.now.date())
    service = AvailabilityService(redis_store=store, config=config, now=clock)

    # Barber 1 does not exist in the database: only the shared tier can answer
    result, cached = service.get_month(db, 1, 1, 2026, 3)

    assert result == _result()
    assert cached is False
    assert MonthKey(1, 1, 2026, 3) in service.cache


def test_service_survives_redis_errors(db, config, clock, barber_and_service):
    barber, svc = barber_and_service
    redis = MagicMock()
    redis.get.side_effect = RedisConnectionError("down")
    redis.set.side_effect = RedisConnectionError("down")
    redis.scan_iter.side_effect = RedisConnectionError("down")
    service = AvailabilityService(redis_store=MonthRedisStore(redis, config), config=config, now=clock)

    result, cached = service.get_month(db, barber.id, svc.id, 2026, 3)

    assert result.total_days == 31
    assert cached is False
    assert service.invalidate(barber_id=barber.id) == 1


def test_service_writes_computed_month_to_shared_tier(redis_mock, db, config, clock, barber_and_service):
    barber, svc = barber_and_service
    service = AvailabilityService(redis_store=MonthRedisStore(redis_mock, config), config=config, now=clock)

    service.get_month(db, barber.id, svc.id, 2026, 3)

    assert list(redis_mock.data) == [f"availability:month:{barber.id}:{svc.id}:2026-03"]


def test_shared_tier_hit_is_not_written_back(store, redis_mock, db, config, clock):
    store.store(_result(), clock.now.date())
    service = AvailabilityService(redis_store=store, config=config, now=clock)

    service.get_month(db, 1, 1, 2026, 3)

    assert redis_mock.set.call_count == 1


def test_invalidation_during_compute_keeps_shared_tier_clean(
    redis_mock, db, config, clock, barber_and_service, monkeypatch,
):
    barber, svc = barber_and_service
    service = AvailabilityService(redis_store=MonthRedisStore(redis_mock, config), config=config, now=clock)
    real_compute_month = service_module.compute_month

    def compute_then_invalidate(*args, **kwargs):
        result = real_compute_month(*args, **kwargs)
        # A block was written while this month was being computed
        service.invalidate(barber_id=barber.id)
        return result

    monkeypatch.setattr(service_module, "compute_month", compute_then_invalidate)

    result, cached = service.get_month(db, barber.id, svc.id, 2026, 3)

    assert result.total_days == 31
    assert cached is False
    assert MonthKey(barber.id, svc.id, 2026, 3) not in service.cache
    assert redis_mock.data == {}

# backend/tests/conftest.py
"""
Pytest configuration.

Every test gets a fresh in-memory SQLite database and an
AvailabilityService whose clock is frozen at FIXED_NOW.

FIXED_NOW = Tuesday 2026-03-10 10:00. March 2026 starts on a Sunday.
"""

import os
import sys

# Must be set before any barbershop import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)

backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

import fnmatch
import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, insert
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from barbershop.database import get_db
from barbershop.main import app
from barbershop.models.generated import (
    Barbers,
    Base,
    Blocks,
    Reservations,
    Services,
    t_barber_services,
)
from barbershop.services.availability import (
    AvailabilityConfig,
    AvailabilityService,
    get_availability_service,
)

FIXED_NOW = datetime(2026, 3, 10, 10, 0)

MON_TO_SAT = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado"]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enable_sqlite_fk(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def config():
    return AvailabilityConfig(slot_step_minutes=15, lead_time_minutes=120, cache_ttl_seconds=300)


@pytest.fixture
def clock():
    """Mutable clock: tests may set clock.now to move time."""

    class Clock:
        now = FIXED_NOW

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def availability(config, clock):
    return AvailabilityService(config=config, now=clock)


@pytest.fixture
def client(session_factory, availability):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_availability_service] = lambda: availability
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def redis_mock():
    """MagicMock backed by a dict, enough for get/set/scan_iter/delete."""
    data = {}
    redis = MagicMock()
    redis.data = data
    redis.get.side_effect = lambda key: data.get(key)
    redis.set.side_effect = lambda key, value, ex=None: data.__setitem__(key, value.encode())
    redis.scan_iter.side_effect = lambda match: [k for k in list(data) if fnmatch.fnmatch(k, match)]

    def delete(*keys):
        return sum(1 for k in keys if data.pop(k, None) is not None)

    redis.delete.side_effect = delete
    return redis


# ── Data helpers ─────────────────────────────────────────────────────────


@pytest.fixture
def make_barber(db):
    def _make(
        name="Yerko",
        work_days=MON_TO_SAT,
        start_time="09:00",
        end_time="18:00",
        is_active=1,
    ):
        raw_days = work_days if isinstance(work_days, str) else json.dumps(work_days, ensure_ascii=False)
        barber = Barbers(
            name=name,
            work_days=raw_days,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
        )
        db.add(barber)
        db.commit()
        db.refresh(barber)
        return barber

    return _make


@pytest.fixture
def make_service(db):
    def _make(name="Corte", duration_minutes=40, is_active=1, barber=None, link_active=1):
        service = Services(name=name, duration_minutes=duration_minutes, price=10000, is_active=is_active)
        db.add(service)
        db.commit()
        db.refresh(service)
        if barber is not None:
            db.execute(insert(t_barber_services).values(
                barber_id=barber.id, service_id=service.id, is_active=link_active,
            ))
            db.commit()
        return service

    return _make


@pytest.fixture
def make_reservation(db):
    def _make(barber, service, date, start_time, end_time=None, status="confirmed"):
        reservation = Reservations(
            barber_id=barber.id,
            service_id=service.id,
            date=date,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        db.add(reservation)
        db.commit()
        db.refresh(reservation)
        return reservation

    return _make


@pytest.fixture
def make_block(db):
    def _make(date_start, date_end=None, start_time=None, end_time=None, barber=None, kind="block"):
        block = Blocks(
            barber_id=barber.id if barber is not None else None,
            date_start=date_start,
            date_end=date_end or date_start,
            start_time=start_time,
            end_time=end_time,
            kind=kind,
        )
        db.add(block)
        db.commit()
        db.refresh(block)
        return block

    return _make


@pytest.fixture
def barber_and_service(make_barber, make_service):
    barber = make_barber()
    service = make_service(barber=barber)
    return barber, service

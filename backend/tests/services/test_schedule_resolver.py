# backend/tests/services/test_schedule_resolver.py

import pytest

from barbershop.services.availability.domain import Weekday
from barbershop.services.availability.errors import ScheduleDataError, ScheduleNotFound
from barbershop.services.availability.resolver import (
    parse_working_days,
    resolve_barber_schedule,
    resolve_schedule,
)


def test_resolves_hours_days_and_duration(db, barber_and_service):
    barber, service = barber_and_service

    config = resolve_schedule(db, barber.id, service.id)

    assert config.barber_id == barber.id
    assert config.service_id == service.id
    assert config.work_start == 9 * 60
    assert config.work_end == 18 * 60
    assert config.duration == 40
    assert config.working_days == frozenset(Weekday(i) for i in range(1, 7))
    assert config.working_day_names == ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado"]


def test_accepts_seconds_in_hours(db, make_barber, make_service):
    barber = make_barber(start_time="09:30:00", end_time="17:45:00")
    service = make_service(barber=barber)

    config = resolve_schedule(db, barber.id, service.id)

    assert (config.work_start, config.work_end) == (570, 1065)


def test_unknown_barber_is_not_found(db):
    with pytest.raises(ScheduleNotFound):
        resolve_schedule(db, 999, 1)


def test_inactive_barber_is_not_found(db, make_barber, make_service):
    barber = make_barber(is_active=0)
    service = make_service(barber=barber)

    with pytest.raises(ScheduleNotFound):
        resolve_schedule(db, barber.id, service.id)


def test_service_not_offered_is_not_found(db, make_barber, make_service):
    barber = make_barber()
    other = make_service(name="Barba")  # not linked

    with pytest.raises(ScheduleNotFound):
        resolve_schedule(db, barber.id, other.id)


def test_inactive_link_or_service_is_not_found(db, make_barber, make_service):
    barber = make_barber()
    unlinked = make_service(barber=barber, link_active=0)
    inactive = make_service(name="Tinte", barber=barber, is_active=0)

    with pytest.raises(ScheduleNotFound):
        resolve_schedule(db, barber.id, unlinked.id)
    with pytest.raises(ScheduleNotFound):
        resolve_schedule(db, barber.id, inactive.id)


def test_inverted_hours_are_a_data_error(db, make_barber, make_service):
    barber = make_barber(start_time="18:00", end_time="09:00")
    service = make_service(barber=barber)

    with pytest.raises(ScheduleDataError):
        resolve_schedule(db, barber.id, service.id)


def test_unparseable_hours_are_a_data_error(db, make_barber, make_service):
    barber = make_barber(start_time="nine")
    service = make_service(barber=barber)

    with pytest.raises(ScheduleDataError):
        resolve_schedule(db, barber.id, service.id)


def test_malformed_working_days_degrade_to_empty(db, make_barber, make_service):
    barber = make_barber(work_days="{not json")
    service = make_service(barber=barber)

    config = resolve_schedule(db, barber.id, service.id)

    assert config.working_days == frozenset()


def test_resolve_for_explicit_duration(db, barber_and_service):
    barber, _ = barber_and_service

    config = resolve_barber_schedule(db, barber.id, 25)

    assert config.service_id is None
    assert config.duration == 25


@pytest.mark.parametrize(
    "raw, expected",
    [
        (["lunes", "martes"], {Weekday.MONDAY, Weekday.TUESDAY}),
        ('["miércoles", "sábado"]', {Weekday.WEDNESDAY, Weekday.SATURDAY}),
        (["Miercoles", "SABADO", "domingo"], {Weekday.WEDNESDAY, Weekday.SATURDAY, Weekday.SUNDAY}),
        (["monday", "Friday"], {Weekday.MONDAY, Weekday.FRIDAY}),
        ([0, 6], {Weekday.SUNDAY, Weekday.SATURDAY}),
        ("lunes,viernes", {Weekday.MONDAY, Weekday.FRIDAY}),
        (["lunes", "feriado", 9, None], {Weekday.MONDAY}),
        ("", set()),
        (None, set()),
        ('{"lunes": true}', set()),
        (42, set()),
    ],
)
def test_parse_working_days(raw, expected):
    assert parse_working_days(raw) == frozenset(expected)

# backend/barbershop/services/availability/resolver.py
"""
ScheduleConfig resolution.

Loads a barber's working window, working days and the duration of the
requested service, and validates them into a ScheduleConfig so later
stages never see raw database shapes.
"""

import json
import logging
import unicodedata

from sqlalchemy.orm import Session

from .cancellation import CancellationToken, check_token
from .config import time_str_to_minutes
from .domain import ScheduleConfig, Weekday
from .errors import ScheduleDataError, ScheduleNotFound

logger = logging.getLogger(__name__)


_DAY_ALIASES: dict[str, Weekday] = {
    # Spanish (stored form)
    "domingo": Weekday.SUNDAY,
    "lunes": Weekday.MONDAY,
    "martes": Weekday.TUESDAY,
    "miercoles": Weekday.WEDNESDAY,
    "jueves": Weekday.THURSDAY,
    "viernes": Weekday.FRIDAY,
    "sabado": Weekday.SATURDAY,
    # English
    "sunday": Weekday.SUNDAY,
    "monday": Weekday.MONDAY,
    "tuesday": Weekday.TUESDAY,
    "wednesday": Weekday.WEDNESDAY,
    "thursday": Weekday.THURSDAY,
    "friday": Weekday.FRIDAY,
    "saturday": Weekday.SATURDAY,
}


def resolve_schedule(
    db: Session,
    barber_id: int,
    service_id: int,
    token: CancellationToken | None = None,
) -> ScheduleConfig:
    """
    Resolve the schedule configuration for a barber/service pair.

    Raises:
        ScheduleNotFound: barber missing or inactive, service missing or
            inactive, or the barber does not offer the service.
        ScheduleDataError: stored hours or duration are unusable.
    """
    check_token(token)

    barber = _get_active_barber(db, barber_id)
    if barber is None:
        raise ScheduleNotFound(barber_id)

    service = _get_offered_service(db, barber_id, service_id)
    if service is None:
        raise ScheduleNotFound(barber_id, service_id)

    config = _build_config(barber, service_id, service.duration_minutes)
    check_token(token)
    return config


def resolve_barber_schedule(
    db: Session,
    barber_id: int,
    duration_minutes: int,
    token: CancellationToken | None = None,
) -> ScheduleConfig:
    """
    Resolve a barber's schedule for an explicit duration (no service lookup).

    Used by the day slot query, which takes the duration directly.
    """
    check_token(token)

    barber = _get_active_barber(db, barber_id)
    if barber is None:
        raise ScheduleNotFound(barber_id)

    config = _build_config(barber, None, duration_minutes)
    check_token(token)
    return config


def _build_config(barber, service_id: int | None, duration) -> ScheduleConfig:
    try:
        work_start = time_str_to_minutes(barber.start_time)
        work_end = time_str_to_minutes(barber.end_time)
    except ValueError as e:
        raise ScheduleDataError(f"Barber {barber.id} has invalid working hours: {e}") from e

    working_days = parse_working_days(barber.work_days)
    if not working_days:
        logger.warning(f"Barber {barber.id} has no usable working days: {barber.work_days!r}")

    try:
        return ScheduleConfig(
            barber_id=barber.id,
            service_id=service_id,
            working_days=working_days,
            work_start=work_start,
            work_end=work_end,
            duration=duration,
        )
    except (TypeError, ValueError) as e:
        raise ScheduleDataError(f"Invalid schedule for barber {barber.id}: {e}") from e


def parse_working_days(raw) -> frozenset[Weekday]:
    """
    Normalize stored working days to canonical weekdays.

    Accepts a list (or JSON-encoded list) of weekday names in Spanish or
    English, case- and accent-insensitive, or integers 0..6 (Sunday=0).
    Unknown entries are skipped; an unparseable payload yields an empty set.
    """
    if raw is None:
        return frozenset()

    values = raw
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return frozenset()
        try:
            values = json.loads(text)
        except json.JSONDecodeError:
            # Also tolerate "lunes,martes,..."
            values = [part for part in text.split(",") if part.strip()]

    if not isinstance(values, (list, tuple, set, frozenset)):
        logger.warning(f"Unparseable working days payload: {raw!r}")
        return frozenset()

    days: set[Weekday] = set()
    for value in values:
        day = _parse_day(value)
        if day is None:
            logger.warning(f"Ignoring unknown working day: {value!r}")
            continue
        days.add(day)
    return frozenset(days)


def _parse_day(value) -> Weekday | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return Weekday(value) if 0 <= value <= 6 else None
    if not isinstance(value, str):
        return None
    name = _strip_accents(value.strip().lower())
    return _DAY_ALIASES.get(name)


def _strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


# ── Database helpers ─────────────────────────────────────────────────────


def _get_active_barber(db: Session, barber_id: int):
    """Get barber by ID if active."""
    from ...models.generated import Barbers
    return db.query(Barbers).filter(
        Barbers.id == barber_id,
        Barbers.is_active == 1,
    ).first()


def _get_offered_service(db: Session, barber_id: int, service_id: int):
    """Get active service if the barber offers it."""
    from ...models.generated import Services, t_barber_services

    return (
        db.query(Services)
        .join(
            t_barber_services,
            Services.id == t_barber_services.c.service_id,
        )
        .filter(
            t_barber_services.c.barber_id == barber_id,
            t_barber_services.c.is_active == 1,
            Services.id == service_id,
            Services.is_active == 1,
        )
        .first()
    )

# backend/barbershop/services/reservations.py
"""
Reservation write path.

Availability answers are advisory. The authoritative overlap guard is
here: a reservation is inserted together with one reservation_claims
row per occupied minute, in the same transaction, under
UNIQUE(barber_id, date, minute). Two overlapping inserts cannot both
commit, whatever the interleaving.
"""

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.generated import ReservationClaims, Reservations
from .availability import AvailabilityService, SlotConflictError
from .availability.config import minutes_to_time_str

logger = logging.getLogger(__name__)

CANCELLED_STATUS = "cancelled"


def create_reservation(
    db: Session,
    availability: AvailabilityService,
    barber_id: int,
    service_id: int,
    target_date: date,
    start: int,
    client_name: str | None = None,
    client_phone: str | None = None,
    client_email: str | None = None,
    notes: str | None = None,
) -> Reservations:
    """
    Create a pending reservation if the slot is bookable.

    Raises:
        ScheduleNotFound: barber/service combination cannot be resolved
        SlotConflictError: slot not bookable, or lost a race for it
    """
    check = availability.check_slot(db, barber_id, service_id, target_date, start)
    if not check.available:
        raise SlotConflictError(
            f"Slot {minutes_to_time_str(start)} on {target_date} is not available: {check.reason}",
            conflicts=list(check.conflicts),
        )

    date_str = target_date.isoformat()
    reservation = Reservations(
        barber_id=barber_id,
        service_id=service_id,
        date=date_str,
        start_time=minutes_to_time_str(check.start),
        end_time=minutes_to_time_str(check.end),
        status="pending",
        client_name=client_name,
        client_phone=client_phone,
        client_email=client_email,
        notes=notes,
    )
    reservation.claims = [
        ReservationClaims(barber_id=barber_id, date=date_str, minute=minute)
        for minute in range(check.start, check.end)
    ]

    db.add(reservation)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            f"Reservation race lost: barber={barber_id} date={date_str} "
            f"start={minutes_to_time_str(start)}"
        )
        raise SlotConflictError("Slot was booked concurrently")
    db.refresh(reservation)

    logger.info(
        f"Reservation created: id={reservation.id}, barber_id={barber_id}, "
        f"service_id={service_id}, time={date_str} {reservation.start_time}-{reservation.end_time}"
    )

    availability.invalidate_dates(barber_id, target_date, target_date)
    return reservation


def cancel_reservation(
    db: Session,
    availability: AvailabilityService,
    reservation_id: int,
) -> Reservations | None:
    """
    Cancel a reservation and release its claimed minutes.

    Returns:
        The reservation, or None if it does not exist.
    """
    reservation = db.get(Reservations, reservation_id)
    if reservation is None:
        return None
    if reservation.status == CANCELLED_STATUS:
        return reservation

    reservation.status = CANCELLED_STATUS
    reservation.claims = []
    db.commit()
    db.refresh(reservation)

    logger.info(f"Reservation cancelled: id={reservation.id}, barber_id={reservation.barber_id}")

    target_date = date.fromisoformat(reservation.date)
    availability.invalidate_dates(reservation.barber_id, target_date, target_date)
    return reservation

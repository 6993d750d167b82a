# backend/barbershop/services/availability/indexer.py
"""
Occupancy indexing.

Loads every active reservation and every block touching a date range in
two queries and indexes them by calendar date, so the month loop can look
a day up in O(1) without going back to the database.

Reservations:
✓ status in the active set (pending / confirmed / in-progress)
✓ end_time missing → start_time + service duration

Blocks:
✓ barber-specific and shop-wide (barber_id IS NULL)
✓ multi-day blocks expanded to one entry per covered date (inclusive)
✓ no times, or 00:00 → 23:59 / missing end → full-day block
"""

import logging
from datetime import date, timedelta
from types import MappingProxyType

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .cancellation import CancellationToken, check_token
from .config import MINUTES_PER_DAY, time_str_to_minutes
from .domain import OccupiedInterval
from .errors import OccupancyDataError

logger = logging.getLogger(__name__)


ACTIVE_RESERVATION_STATUSES = (
    "pending",
    "confirmed",
    "in-progress",
    "in_progress",
    # Legacy Spanish values
    "pendiente",
    "confirmada",
    "en_progreso",
)

# "23:59" and "23:59:59" both mean "until the end of the day"
_END_OF_DAY_THRESHOLD = MINUTES_PER_DAY - 1


class OccupancyIndex:
    """Read-only map of date → occupied intervals for one barber."""

    def __init__(
        self,
        barber_id: int,
        range_start: date,
        range_end: date,
        by_date: dict[date, list[OccupiedInterval]],
    ):
        self.barber_id = barber_id
        self.range_start = range_start
        self.range_end = range_end
        self._by_date = MappingProxyType({
            dt: tuple(sorted(intervals, key=lambda i: (i.start, i.end)))
            for dt, intervals in by_date.items()
        })

    def for_date(self, dt: date) -> tuple[OccupiedInterval, ...]:
        return self._by_date.get(dt, ())

    def has_full_day_block(self, dt: date) -> bool:
        return any(interval.full_day for interval in self.for_date(dt))

    @property
    def dates(self) -> list[date]:
        return sorted(self._by_date)

    def __len__(self) -> int:
        return sum(len(intervals) for intervals in self._by_date.values())


def index_occupancy(
    db: Session,
    barber_id: int,
    range_start: date,
    range_end: date,
    token: CancellationToken | None = None,
) -> OccupancyIndex:
    """
    Build the occupancy index for [range_start, range_end] (inclusive).

    Raises:
        OccupancyDataError: a reservation or block has unparseable dates/times.
    """
    check_token(token)
    if range_end < range_start:
        range_start, range_end = range_end, range_start

    by_date: dict[date, list[OccupiedInterval]] = {}

    reservations = _get_active_reservations(db, barber_id, range_start, range_end)
    for reservation, service_duration in reservations:
        dt, interval = reservation_to_interval(reservation, service_duration)
        by_date.setdefault(dt, []).append(interval)

    check_token(token)

    blocks = _get_blocks(db, barber_id, range_start, range_end)
    for block in blocks:
        for dt, interval in block_to_intervals(block, range_start, range_end):
            by_date.setdefault(dt, []).append(interval)

    check_token(token)

    logger.debug(
        f"Indexed occupancy barber={barber_id} {range_start}..{range_end}: "
        f"{len(reservations)} reservations, {len(blocks)} blocks"
    )
    return OccupancyIndex(barber_id, range_start, range_end, by_date)


# ── Record conversion ────────────────────────────────────────────────────


def reservation_to_interval(reservation, service_duration: int | None = None) -> tuple[date, OccupiedInterval]:
    """Convert a reservation row to (date, interval)."""
    try:
        dt = _parse_date(reservation.date)
        start = time_str_to_minutes(reservation.start_time)
        if reservation.end_time:
            end = time_str_to_minutes(reservation.end_time)
        elif service_duration:
            end = min(start + service_duration, MINUTES_PER_DAY)
        else:
            raise ValueError("no end_time and no service duration")
        return dt, OccupiedInterval(start, end, source="reservation", ref_id=reservation.id)
    except (TypeError, ValueError) as e:
        raise OccupancyDataError(f"Reservation {reservation.id} has invalid time data: {e}") from e


def block_to_intervals(block, range_start: date, range_end: date) -> list[tuple[date, OccupiedInterval]]:
    """Expand a block row to one (date, interval) per covered date inside the range."""
    try:
        first = _parse_date(block.date_start)
        last = _parse_date(block.date_end)
        interval = _block_interval(block)
    except (TypeError, ValueError) as e:
        raise OccupancyDataError(f"Block {block.id} has invalid date/time data: {e}") from e

    if last < first:
        logger.warning(f"Block {block.id} has date_end before date_start, swapping")
        first, last = last, first

    result = []
    current = max(first, range_start)
    stop = min(last, range_end)
    while current <= stop:
        result.append((current, interval))
        current += timedelta(days=1)
    return result


def is_full_day_block(start_time: str | None, end_time: str | None) -> bool:
    """True when the stored times mean "the whole day"."""
    if not start_time and not end_time:
        return True
    start = time_str_to_minutes(start_time) if start_time else 0
    if start != 0:
        return False
    if not end_time:
        return True
    return time_str_to_minutes(end_time) >= _END_OF_DAY_THRESHOLD


def _block_interval(block) -> OccupiedInterval:
    if is_full_day_block(block.start_time, block.end_time):
        return OccupiedInterval.whole_day(source="block", ref_id=block.id)

    start = time_str_to_minutes(block.start_time) if block.start_time else 0
    end = time_str_to_minutes(block.end_time) if block.end_time else MINUTES_PER_DAY
    if end <= start:
        raise ValueError(f"end {block.end_time!r} is not after start {block.start_time!r}")
    return OccupiedInterval(start, end, source="block", ref_id=block.id)


def _parse_date(value) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# ── Database helpers ─────────────────────────────────────────────────────


def _get_active_reservations(db: Session, barber_id: int, range_start: date, range_end: date) -> list:
    """Get active reservations with their service duration."""
    from ...models.generated import Reservations, Services

    return (
        db.query(Reservations, Services.duration_minutes)
        .outerjoin(Services, Services.id == Reservations.service_id)
        .filter(
            Reservations.barber_id == barber_id,
            Reservations.date >= range_start.isoformat(),
            Reservations.date <= range_end.isoformat(),
            Reservations.status.in_(ACTIVE_RESERVATION_STATUSES),
        )
        .order_by(Reservations.date, Reservations.start_time)
        .all()
    )


def _get_blocks(db: Session, barber_id: int, range_start: date, range_end: date) -> list:
    """Get barber and shop-wide blocks overlapping the range."""
    from ...models.generated import Blocks

    return (
        db.query(Blocks)
        .filter(
            or_(Blocks.barber_id == barber_id, Blocks.barber_id.is_(None)),
            Blocks.date_start <= range_end.isoformat(),
            Blocks.date_end >= range_start.isoformat(),
        )
        .all()
    )

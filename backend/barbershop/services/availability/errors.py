# backend/barbershop/services/availability/errors.py
"""
Exceptions raised by the availability engine.

Routers map them to HTTP status codes:
  ScheduleNotFound      → 404
  ScheduleDataError     → 500
  OccupancyDataError    → 500
  ComputationCancelled  → 409
  SlotConflictError     → 409
"""


class AvailabilityError(Exception):
    """Base class for availability engine errors."""


class ScheduleNotFound(AvailabilityError):
    """Barber missing/inactive, service missing/inactive, or not offered by the barber."""

    def __init__(self, barber_id: int, service_id: int | None = None):
        self.barber_id = barber_id
        self.service_id = service_id
        if service_id is None:
            message = f"Barber {barber_id} not found or inactive"
        else:
            message = f"Barber {barber_id} does not offer service {service_id}"
        super().__init__(message)


class ScheduleDataError(AvailabilityError):
    """Persisted schedule data cannot be used (bad hours, bad duration)."""


class OccupancyDataError(AvailabilityError):
    """A reservation or block record has unparseable times."""


class ComputationCancelled(AvailabilityError):
    """The request was superseded before the computation finished."""


class SlotConflictError(AvailabilityError):
    """The requested start time is not bookable."""

    def __init__(self, message: str, conflicts: list | None = None):
        self.conflicts = conflicts or []
        super().__init__(message)

# backend/barbershop/routers/reservations.py
# Only the guarded write path lives here; PATCH = 405, DELETE = 405

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Reservations as DBReservations
from ..schemas.reservations import ReservationCreate, ReservationRead
from ..services.availability import AvailabilityService, get_availability_service
from ..services.availability.config import time_str_to_minutes
from ..services.availability.errors import ScheduleNotFound, SlotConflictError
from ..services.reservations import cancel_reservation, create_reservation

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.get("/{id}", response_model=ReservationRead)
def get_reservation(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBReservations, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
def create(
    data: ReservationCreate,
    db: Session = Depends(get_db),
    availability: AvailabilityService = Depends(get_availability_service),
):
    try:
        start = time_str_to_minutes(data.start_time)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start_time must be HH:MM")

    try:
        return create_reservation(
            db,
            availability,
            barber_id=data.barber_id,
            service_id=data.service_id,
            target_date=data.date,
            start=start,
            client_name=data.client_name,
            client_phone=data.client_phone,
            client_email=data.client_email,
            notes=data.notes,
        )
    except ScheduleNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Barber or service not found")
    except SlotConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/{id}/cancel", response_model=ReservationRead)
def cancel(
    id: int,
    db: Session = Depends(get_db),
    availability: AvailabilityService = Depends(get_availability_service),
):
    obj = cancel_reservation(db, availability, id)
    if obj is None:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )

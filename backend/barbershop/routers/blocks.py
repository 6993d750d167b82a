# backend/barbershop/routers/blocks.py
# PATCH = 405, DELETE = ALLOWED (hard)

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Barbers as DBBarbers, Blocks as DBBlocks
from ..schemas.blocks import BlockCreate, BlockRead
from ..services.availability import AvailabilityService, get_availability_service

router = APIRouter(prefix="/blocks", tags=["blocks"])


@router.get("/", response_model=list[BlockRead])
def list_blocks(
    date_from: date | None = None,
    date_to: date | None = None,
    barber_id: int | None = None,
    db: Session = Depends(get_db),
):
    query = db.query(DBBlocks)
    if date_from is not None:
        query = query.filter(DBBlocks.date_end >= date_from.isoformat())
    if date_to is not None:
        query = query.filter(DBBlocks.date_start <= date_to.isoformat())
    if barber_id is not None:
        query = query.filter(or_(DBBlocks.barber_id == barber_id, DBBlocks.barber_id.is_(None)))
    return query.order_by(DBBlocks.date_start).all()


@router.get("/{id}", response_model=BlockRead)
def get_block(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBBlocks, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=BlockRead, status_code=status.HTTP_201_CREATED)
def create_block(
    data: BlockCreate,
    db: Session = Depends(get_db),
    availability: AvailabilityService = Depends(get_availability_service),
):
    if data.barber_id is not None and db.get(DBBarbers, data.barber_id) is None:
        raise HTTPException(status_code=404, detail="Barber not found")

    obj = DBBlocks(**data.model_dump(mode="json"))
    db.add(obj)
    db.commit()
    db.refresh(obj)

    availability.invalidate_dates(data.barber_id, data.date_start, data.date_end)
    return obj


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_block(
    id: int,
    db: Session = Depends(get_db),
    availability: AvailabilityService = Depends(get_availability_service),
):
    obj = db.get(DBBlocks, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    barber_id = obj.barber_id
    date_start = date.fromisoformat(obj.date_start)
    date_end = date.fromisoformat(obj.date_end)

    db.delete(obj)
    db.commit()

    availability.invalidate_dates(barber_id, date_start, date_end)

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_staff
from shared.core.database import get_parking_db as get_db
from shared.core.schemas import UserToken
from ...crud.bookings import bookings_crud as crud
from ...schemas.booking_schemas import (
    BookingOut,
    BookingTimeUpdate,
    GateStatusOut,
    QRScanRequest,
    QRScanResult,
    WalkInCreate,
)

router = APIRouter(
    prefix="/api/watchman",
    tags=["watchman"],
    dependencies=[Depends(allow_staff)]
)


@router.post("/bookings/{booking_id}/entry", response_model=BookingOut)
def mark_entry(
    booking_id: UUID,
    data: Optional[BookingTimeUpdate] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    return crud.mark_entry(db, booking_id, current_user, entry_time=data.at if data else None)


@router.post("/bookings/{booking_id}/exit", response_model=BookingOut)
def mark_exit(
    booking_id: UUID,
    data: Optional[BookingTimeUpdate] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    return crud.mark_exit(db, booking_id, current_user, exit_time=data.at if data else None)


@router.post("/walk-in", response_model=BookingOut)
def create_walk_in(
    data: WalkInCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    return crud.create_walk_in(db, data, current_user)


@router.post("/scan", response_model=QRScanResult)
def scan_qr(
    data: QRScanRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    return crud.scan_qr(db, data.qr_code, current_user)


@router.get("/current-status", response_model=GateStatusOut)
def current_status(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    return crud.get_gate_status(db, current_user)

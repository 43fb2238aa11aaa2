from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_staff, validate_current_token
from shared.core.database import get_parking_db as get_db
from shared.core.schemas import UserToken
from ...crud.bookings import bookings_crud as crud
from ...crud.parking_lots import parking_lots_crud
from ...crud.payments.payment_gateway import PaymentGateway, get_payment_gateway
from ...schemas.booking_schemas import (
    AutoExpireResult,
    BookingCreate,
    BookingListResponse,
    BookingOut,
    BookingRequest,
    BookingStatusUpdate,
    ExtensionInfo,
    ExtensionRequest,
    PayPenaltyRequest,
    PayPenaltyResult,
    PenaltyOut,
    PenaltyRecalcResult,
)
from ...schemas.parking_lot_schemas import OrgAvailabilityOut

router = APIRouter(
    prefix="/api/bookings",
    tags=["bookings"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("", response_model=BookingOut)
def create_booking(
    request: BookingCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_booking(db, request, current_user)


@router.get("/check-availability/{org_id}", response_model=OrgAvailabilityOut)
def check_availability(
    org_id: UUID,
    db: Session = Depends(get_db)
):
    return parking_lots_crud.get_org_availability(db, org_id)


@router.post("/auto-expire", response_model=AutoExpireResult)
def auto_expire_bookings(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    return crud.auto_expire_bookings(db)


@router.post("/calculate-penalties", response_model=PenaltyRecalcResult)
def calculate_penalties(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    return crud.recalculate_penalties(db, org_id=current_user.org_id)


@router.get("/user/{user_id}", response_model=List[BookingOut])
def get_user_bookings(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_user_bookings(db, user_id, current_user)


@router.get("/organization/{org_id}", response_model=BookingListResponse)
def get_org_bookings(
    org_id: UUID,
    params: BookingRequest = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_staff)
):
    crud.ensure_org_staff(current_user, org_id)
    return crud.get_org_bookings(db, org_id, params)


@router.post("/pay-penalty-and-rebook/{booking_id}", response_model=PayPenaltyResult)
def pay_penalty_and_rebook(
    booking_id: UUID,
    request: PayPenaltyRequest,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.pay_penalty_and_rebook(db, gateway, booking_id, request, current_user)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_booking(db, booking_id, current_user)


@router.get("/{booking_id}/penalty", response_model=PenaltyOut)
def get_booking_penalty(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_penalty(db, booking_id, current_user)


@router.put("/{booking_id}/status", response_model=BookingOut)
def update_booking_status(
    booking_id: UUID,
    data: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.update_booking_status(
        db, booking_id, data.status, current_user, exit_time=data.exit_time)


@router.post("/{booking_id}/check-extension", response_model=ExtensionInfo)
def check_extension(
    booking_id: UUID,
    data: ExtensionRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.check_extension(db, booking_id, data.extension_hours, current_user)


@router.put("/{booking_id}/extend", response_model=BookingOut)
def extend_booking(
    booking_id: UUID,
    data: ExtensionRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.extend_booking(db, booking_id, data.extension_hours, current_user)

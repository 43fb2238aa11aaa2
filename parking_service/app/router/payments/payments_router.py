from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, validate_current_token
from shared.core.database import get_parking_db as get_db
from shared.core.schemas import CommonQueryParams, UserToken
from ...crud.bookings.bookings_crud import ensure_org_staff, get_booking
from ...crud.payments import payments_crud as crud
from ...crud.payments.payment_gateway import PaymentGateway, get_payment_gateway
from ...schemas.payment_schemas import OrgRevenueOut, PaymentCreate, PaymentListResponse, PaymentOut

router = APIRouter(
    prefix="/api/payments",
    tags=["payments"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("", response_model=PaymentOut)
def pay_booking(
    data: PaymentCreate,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    current_user: UserToken = Depends(validate_current_token)
):
    # ownership check
    get_booking(db, data.booking_id, current_user)
    return crud.pay_booking(db, gateway, data.booking_id, data.payment_method, current_user)


@router.get("/booking/{booking_id}", response_model=PaymentListResponse)
def get_booking_payments(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    get_booking(db, booking_id, current_user)
    return crud.get_booking_payments(db, booking_id)


@router.get("/history", response_model=PaymentListResponse)
def get_payment_history(
    params: CommonQueryParams = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_user_payments(db, current_user.user_id, params.skip, params.limit)


@router.get("/organization-revenue/{org_id}", response_model=OrgRevenueOut)
def get_org_revenue(
    org_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    ensure_org_staff(current_user, org_id)
    return crud.get_org_revenue(db, org_id, start_date, end_date)

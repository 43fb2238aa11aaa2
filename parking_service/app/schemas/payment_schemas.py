from datetime import date, datetime
from uuid import UUID
from typing import List
from pydantic import BaseModel

from ..enum.payment_enum import PaymentMethod, PaymentPurpose, PaymentStatus


class PaymentCreate(BaseModel):
    booking_id: UUID
    payment_method: PaymentMethod


class PaymentOut(BaseModel):
    id: UUID
    booking_id: UUID
    user_id: str
    amount: float
    method: PaymentMethod
    purpose: PaymentPurpose
    status: PaymentStatus
    transaction_id: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class PaymentListResponse(BaseModel):
    payments: List[PaymentOut]
    total: int


class OrgRevenueOut(BaseModel):
    org_id: UUID
    start_date: date | None = None
    end_date: date | None = None
    booking_revenue: float
    penalty_revenue: float
    total_revenue: float
    payment_count: int

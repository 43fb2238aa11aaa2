from datetime import datetime, date
from uuid import UUID
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from shared.core.schemas import CommonQueryParams
from ..enum.booking_enum import BookingPaymentStatus, BookingStatus, RequesterRole, VehicleType
from ..enum.payment_enum import PaymentMethod


# ----------------- Create -----------------
class BookingCreate(BaseModel):
    org_id: UUID
    vehicle_number: str
    vehicle_type: VehicleType = VehicleType.four_wheeler
    start_time: datetime
    end_time: datetime


class WalkInCreate(BaseModel):
    vehicle_number: str
    vehicle_type: VehicleType = VehicleType.four_wheeler
    hours: int = Field(gt=0, le=24)


# ----------------- Out -----------------
class PenaltyOut(BaseModel):
    overstay_minutes: int
    overstay_hours: int
    penalty_amount: float
    assessed_at: Optional[datetime] = None
    is_paid: bool = False
    paid_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BookingOut(BaseModel):
    id: UUID
    org_id: UUID
    lot_id: UUID
    lot_name: Optional[str] = None
    slot_number: int
    requester_id: str
    requester_role: RequesterRole
    vehicle_number: str
    vehicle_type: str
    start_time: datetime
    end_time: datetime
    duration_hours: int
    amount: float
    status: BookingStatus
    payment_status: BookingPaymentStatus
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    overstay_minutes: Optional[int] = 0
    penalty_amount: Optional[float] = 0
    rebooking_id: Optional[UUID] = None
    qr_code_data: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ----------------- Request -----------------
class BookingRequest(CommonQueryParams):
    status: Optional[BookingStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class BookingListResponse(BaseModel):
    bookings: List[BookingOut]
    total: int

    model_config = {"from_attributes": True}


# ----------------- Transitions -----------------
class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    exit_time: Optional[datetime] = None

    @model_validator(mode="after")
    def check_target_status(self):
        if self.status not in (BookingStatus.cancelled, BookingStatus.completed):
            raise ValueError("status must be 'cancelled' or 'completed'")
        return self


class ExtensionRequest(BaseModel):
    extension_hours: int = Field(gt=0, le=24)


class ExtensionInfo(BaseModel):
    booking_id: UUID
    can_extend_same_slot: bool
    current_end_time: datetime
    new_end_time: datetime
    additional_hours: int
    additional_amount: float


class AutoExpireResult(BaseModel):
    expired_count: int
    activated_count: int


class PayPenaltyRequest(BaseModel):
    payment_method: PaymentMethod
    new_booking_start_time: Optional[datetime] = None
    new_booking_end_time: Optional[datetime] = None

    @model_validator(mode="after")
    def check_new_range(self):
        if (self.new_booking_start_time is None) != (self.new_booking_end_time is None):
            raise ValueError(
                "new_booking_start_time and new_booking_end_time go together")
        return self


class PayPenaltyResult(BaseModel):
    booking: BookingOut
    penalty: PenaltyOut
    transaction_id: str
    new_booking: Optional[BookingOut] = None
    rebook_error: Optional[str] = None


# ----------------- Watchman -----------------
class BookingTimeUpdate(BaseModel):
    at: Optional[datetime] = None


class QRScanRequest(BaseModel):
    qr_code: str


class QRScanResult(BaseModel):
    booking: BookingOut
    valid: bool
    reason: Optional[str] = None


class GateStatusOut(BaseModel):
    org_id: UUID
    total_slots: int
    available_slots: int
    occupancy_rate: float
    vehicles_inside: List[BookingOut]
    overstays: List[BookingOut]
    recent_exits: List[BookingOut]


# ----------------- Penalty -----------------
class PenaltyRecalcResult(BaseModel):
    overstay_count: int
    updated_count: int

import uuid
from sqlalchemy import Column, String, Integer, Numeric, Text, ForeignKey, CheckConstraint, DateTime, Enum as SAEnum, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base
from ..enum.booking_enum import BookingPaymentStatus, BookingStatus, RequesterRole


class ParkingBooking(Base):
    __tablename__ = "parking_bookings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), ForeignKey("orgs.id"), nullable=False, index=True)
    lot_id = Column(Uuid(as_uuid=True), ForeignKey("parking_lots.id"), nullable=False, index=True)
    slot_number = Column(Integer, nullable=False)

    requester_id = Column(String(64), nullable=False, index=True)
    requester_role = Column(SAEnum(RequesterRole, native_enum=False, length=32), nullable=False)
    requester_org_id = Column(Uuid(as_uuid=True), nullable=True)

    vehicle_number = Column(String(20), nullable=False)  # normalized uppercase
    vehicle_type = Column(String(20), nullable=False)

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False, index=True)
    duration_hours = Column(Integer, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False, default=0)

    status = Column(SAEnum(BookingStatus, native_enum=False, length=16),
                    nullable=False, default=BookingStatus.pending, index=True)
    payment_status = Column(SAEnum(BookingPaymentStatus, native_enum=False, length=16),
                            nullable=False, default=BookingPaymentStatus.pending)

    entry_time = Column(DateTime)
    exit_time = Column(DateTime)
    overstay_minutes = Column(Integer, default=0)
    penalty_amount = Column(Numeric(10, 2), default=0)

    # booking spawned when the penalty was paid together with a new request
    rebooking_id = Column(Uuid(as_uuid=True), ForeignKey("parking_bookings.id"))
    qr_code_data = Column(Text)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_booking_range"),
    )

    # concurrent transitions fail with StaleDataError
    __mapper_args__ = {"version_id_col": version}

    # relationships
    lot = relationship("ParkingLot", back_populates="bookings")
    org = relationship("Org")
    penalty = relationship("BookingPenalty", back_populates="booking",
                           uselist=False, cascade="all, delete")
    payments = relationship("Payment", back_populates="booking")

import uuid
from sqlalchemy import Column, String, Numeric, ForeignKey, DateTime, Enum as SAEnum, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base
from ..enum.payment_enum import PaymentMethod, PaymentPurpose, PaymentStatus


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(Uuid(as_uuid=True), ForeignKey("parking_bookings.id"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(SAEnum(PaymentMethod, native_enum=False, length=16), nullable=False)
    purpose = Column(SAEnum(PaymentPurpose, native_enum=False, length=16), nullable=False)
    status = Column(SAEnum(PaymentStatus, native_enum=False, length=16), nullable=False)
    transaction_id = Column(String(64), nullable=False)
    # "<booking_id>:<intent>", retries of the same intent reuse the row
    idempotency_key = Column(String(128), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # relationships
    booking = relationship("ParkingBooking", back_populates="payments")

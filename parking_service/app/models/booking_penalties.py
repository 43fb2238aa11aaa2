import uuid
from sqlalchemy import Boolean, Column, Integer, Numeric, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base


class BookingPenalty(Base):
    __tablename__ = "booking_penalties"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # one penalty record per booking
    booking_id = Column(Uuid(as_uuid=True), ForeignKey(
        "parking_bookings.id", ondelete="CASCADE"), nullable=False, unique=True)
    overstay_minutes = Column(Integer, nullable=False, default=0)
    overstay_hours = Column(Integer, nullable=False, default=0)
    penalty_amount = Column(Numeric(10, 2), nullable=False, default=0)
    assessed_at = Column(DateTime, nullable=False)
    is_paid = Column(Boolean, default=False, nullable=False)
    paid_at = Column(DateTime)
    payment_id = Column(Uuid(as_uuid=True), ForeignKey("payments.id"))

    # relationships
    booking = relationship("ParkingBooking", back_populates="penalty")

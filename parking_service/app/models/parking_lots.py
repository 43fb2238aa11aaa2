import uuid
from sqlalchemy import Boolean, CheckConstraint, Column, String, Text, Integer, ForeignKey, UniqueConstraint, DateTime, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class ParkingLot(Base):
    __tablename__ = "parking_lots"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), ForeignKey("orgs.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    total_slots = Column(Integer, nullable=False)
    # lower value is allocated first
    priority_order = Column(Integer, nullable=False, default=1)
    # cached, recomputed from bookings on every availability read
    available_slots = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_org_lot_name"),
        CheckConstraint("total_slots > 0", name="ck_lot_total_slots"),
        CheckConstraint(
            "available_slots >= 0 AND available_slots <= total_slots",
            name="ck_lot_available_slots"),
    )

    # relationships
    org = relationship("Org", back_populates="parking_lots")
    bookings = relationship("ParkingBooking", back_populates="lot")

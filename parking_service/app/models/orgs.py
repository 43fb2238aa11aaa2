import uuid
from sqlalchemy import Column, String, Text, Numeric, DateTime, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Org(Base):
    __tablename__ = "orgs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    address = Column(Text)
    operating_hours = Column(String(100))
    visitor_hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)
    parking_rules = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    # relationships
    parking_lots = relationship("ParkingLot", back_populates="org")

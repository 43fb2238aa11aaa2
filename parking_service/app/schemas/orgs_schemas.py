from datetime import datetime
from uuid import UUID
from typing import Optional
from pydantic import BaseModel, Field


class OrgBase(BaseModel):
    name: str
    address: Optional[str] = None
    operating_hours: Optional[str] = None
    visitor_hourly_rate: float = Field(ge=0)
    parking_rules: Optional[str] = None


class OrgCreate(OrgBase):
    pass


class OrgUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    operating_hours: Optional[str] = None
    visitor_hourly_rate: Optional[float] = Field(default=None, ge=0)
    parking_rules: Optional[str] = None


class OrgOut(OrgBase):
    id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

from datetime import datetime
from uuid import UUID
from typing import List, Optional
from pydantic import BaseModel, Field


class ParkingLotCreate(BaseModel):
    org_id: Optional[UUID] = None
    name: str
    description: Optional[str] = None
    total_slots: int = Field(gt=0)
    priority_order: int = Field(default=1, ge=1)


class ParkingLotUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    total_slots: Optional[int] = Field(default=None, gt=0)
    priority_order: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class ParkingLotOut(BaseModel):
    lot_id: UUID
    org_id: UUID
    lot_name: str
    lot_description: Optional[str] = None
    priority_order: int
    total_slots: int
    available_slots: int
    is_active: bool
    created_at: Optional[datetime] = None


class OrgAvailabilityOut(BaseModel):
    org_id: UUID
    total_slots: int
    available_slots: int
    occupied_slots: int
    occupancy_rate: float
    lots: List[ParkingLotOut]

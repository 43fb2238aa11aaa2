from datetime import date
from uuid import UUID
from typing import Dict, List
from pydantic import BaseModel


class OrgDashboardOut(BaseModel):
    org_id: UUID
    total_bookings: int
    today_bookings: int
    bookings_by_status: Dict[str, int]
    total_slots: int
    available_slots: int
    occupancy_rate: float
    booking_revenue: float
    penalty_revenue: float
    total_revenue: float
    unpaid_penalty_count: int
    unpaid_penalty_amount: float


class DailyBookings(BaseModel):
    day: date
    bookings: int
    booked_amount: float


class OrgAnalyticsOut(BaseModel):
    org_id: UUID
    start_date: date
    end_date: date
    total_bookings: int
    member_bookings: int
    visitor_bookings: int
    walk_in_bookings: int
    cancelled_bookings: int
    overstay_rate: float
    daily: List[DailyBookings]

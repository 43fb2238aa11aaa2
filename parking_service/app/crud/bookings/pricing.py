"""Charge computation for parking bookings.

Pure functions only: nothing here touches the session or the clock.
"""
import math
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from ...enum.booking_enum import RequesterRole

ONE_HOUR = timedelta(hours=1)


def duration_hours(start_time: datetime, end_time: datetime) -> int:
    """Whole hours covering the span; 60 minutes is 1, 61 minutes is 2."""
    return math.ceil((end_time - start_time) / ONE_HOUR)


def is_home_member(requester_role: RequesterRole, requester_org_id: Optional[UUID], org_id: UUID) -> bool:
    return (
        requester_role == RequesterRole.organization_member
        and requester_org_id is not None
        and str(requester_org_id) == str(org_id)
    )


def compute_amount(hours: int, org, requester_role: RequesterRole, requester_org_id: Optional[UUID]) -> Decimal:
    if is_home_member(requester_role, requester_org_id, org.id):
        return Decimal("0.00")

    rate = Decimal(str(org.visitor_hourly_rate))
    return (rate * hours).quantize(Decimal("0.01"))

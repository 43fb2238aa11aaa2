import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from shared.core.config import settings


@dataclass(frozen=True)
class PenaltyInfo:
    overstay_minutes: int
    overstay_hours: int
    penalty_amount: Decimal


def compute_penalty(end_time: datetime, visitor_hourly_rate, now: datetime,
                    multiplier: int = None) -> PenaltyInfo:
    """Penalty for staying past end_time, charged at a multiple of the visitor rate.

    Members pay the same penalty as visitors once they overstay.
    """
    if multiplier is None:
        multiplier = settings.PENALTY_RATE_MULTIPLIER

    if now <= end_time:
        return PenaltyInfo(0, 0, Decimal("0.00"))

    # a started minute counts as a full one
    overstay_minutes = math.ceil((now - end_time).total_seconds() / 60)
    overstay_hours = math.ceil(overstay_minutes / 60)
    rate = Decimal(str(visitor_hourly_rate))
    penalty_amount = (rate * multiplier * overstay_hours).quantize(Decimal("0.01"))

    return PenaltyInfo(overstay_minutes, overstay_hours, penalty_amount)

import asyncio
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.database import ParkingSessionLocal
from ..bookings.bookings_crud import auto_expire_bookings, recalculate_penalties
from ...schemas.booking_schemas import AutoExpireResult

logger = logging.getLogger(__name__)


def process_booking_expiry(db: Session, now: datetime = None) -> AutoExpireResult:
    try:
        result = auto_expire_bookings(db, now)
        # overstays flagged earlier keep accruing until the vehicle exits
        recalculate_penalties(db, now=now)
        return result
    except Exception:
        db.rollback()
        logger.exception("Booking expiry sweep failed")
        return AutoExpireResult(expired_count=0, activated_count=0)


def run_expiry_sweep() -> AutoExpireResult:
    """One sweep on a fresh session, for callers outside a request."""
    db = ParkingSessionLocal()
    try:
        return process_booking_expiry(db)
    finally:
        db.close()


async def expiry_sweep_loop(interval_seconds: int = None):
    interval = interval_seconds or settings.AUTO_EXPIRE_INTERVAL_SECONDS
    logger.info("Booking expiry sweep every %ss", interval)

    while True:
        await asyncio.sleep(interval)
        await asyncio.to_thread(run_expiry_sweep)

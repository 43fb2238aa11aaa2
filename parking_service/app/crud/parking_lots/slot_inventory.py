"""Slot capacity and allocation across an organization's parking lots.

Slots are numbered 1..total_slots inside each lot. A slot is taken for a
time range when a slot-holding booking on it overlaps that range; nothing
else is stored per slot.

Allocation must not race: every caller that reads free slots and then
writes a booking holds the lot guard (an in-process lock per lot plus a
row lock on the lot) until its transaction is committed or rolled back.
"""
import logging
import threading
from contextlib import ExitStack
from datetime import datetime, timedelta
from typing import Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ...core.exceptions import NoCapacityError
from ...enum.booking_enum import BookingStatus, SLOT_HOLDING_STATUSES
from ...models.bookings import ParkingBooking
from ...models.parking_lots import ParkingLot

logger = logging.getLogger(__name__)


class LotLockRegistry:
    """One reentrant lock per parking lot, created on first use."""

    def __init__(self):
        self._locks = {}
        self._guard = threading.Lock()

    def get(self, lot_id) -> threading.RLock:
        key = str(lot_id)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock


lot_locks = LotLockRegistry()


def overlaps(start_1: datetime, end_1: datetime, start_2: datetime, end_2: datetime) -> bool:
    """Half-open ranges: a booking ending when another starts does not overlap."""
    return start_1 < end_2 and start_2 < end_1


def holding_filter(start: datetime, end: datetime):
    """Bookings that keep their slot for some part of [start, end).

    An overstay with no recorded exit holds its slot open-ended; after the
    exit it holds up to the exit time.
    """
    is_overstay = ParkingBooking.status == BookingStatus.overstay
    return and_(
        ParkingBooking.status.in_(SLOT_HOLDING_STATUSES),
        ParkingBooking.start_time < end,
        or_(
            and_(is_overstay, ParkingBooking.exit_time.is_(None)),
            and_(is_overstay, ParkingBooking.exit_time > start),
            and_(~is_overstay, ParkingBooking.end_time > start),
        ),
    )


def lock_lot(db: Session, lot_id: UUID, stack: ExitStack) -> ParkingLot:
    """Serialize on one lot until ``stack`` is closed."""
    stack.enter_context(lot_locks.get(lot_id))
    return (
        db.query(ParkingLot)
        .filter(ParkingLot.id == lot_id)
        .with_for_update()
        .populate_existing()
        .one()
    )


def get_org_lots(db: Session, org_id: UUID, active_only: bool = True):
    query = db.query(ParkingLot).filter(ParkingLot.org_id == org_id)
    if active_only:
        query = query.filter(ParkingLot.is_active == True)

    # equal priorities fall back to lot id
    return query.order_by(ParkingLot.priority_order.asc(), ParkingLot.id.asc()).all()


def occupied_slot_numbers(
    db: Session,
    lot_id: UUID,
    start: datetime,
    end: datetime,
    exclude_booking_id: Optional[UUID] = None
) -> Set[int]:
    query = db.query(ParkingBooking.slot_number).filter(
        ParkingBooking.lot_id == lot_id,
        holding_filter(start, end),
    )
    if exclude_booking_id is not None:
        query = query.filter(ParkingBooking.id != exclude_booking_id)

    return {row.slot_number for row in query.all()}


def allocate_slot(
    db: Session,
    org_id: UUID,
    start: datetime,
    end: datetime,
    stack: ExitStack
) -> Tuple[ParkingLot, int]:
    """Lowest free slot of the first lot, by priority, free for the whole range."""
    for candidate in get_org_lots(db, org_id):
        lot = lock_lot(db, candidate.id, stack)
        if not lot.is_active:
            continue

        taken = occupied_slot_numbers(db, lot.id, start, end)
        for slot_number in range(1, lot.total_slots + 1):
            if slot_number not in taken:
                logger.info("Allocated slot %s in lot '%s' for %s - %s",
                            slot_number, lot.name, start, end)
                return lot, slot_number

    logger.warning("No capacity in org %s for %s - %s", org_id, start, end)
    raise NoCapacityError("No parking slot is available for the requested time")


def is_slot_free(
    db: Session,
    lot_id: UUID,
    slot_number: int,
    start: datetime,
    end: datetime,
    exclude_booking_id: Optional[UUID] = None
) -> bool:
    return slot_number not in occupied_slot_numbers(
        db, lot_id, start, end, exclude_booking_id)


def held_slot_count(db: Session, lot_id: UUID, now: datetime) -> int:
    return len(occupied_slot_numbers(
        db, lot_id, now, now + timedelta(microseconds=1)))


def refresh_lot_availability(db: Session, lot: ParkingLot, now: datetime) -> int:
    held = held_slot_count(db, lot.id, now)
    lot.available_slots = max(0, lot.total_slots - held)
    return lot.available_slots


def release_slot(db: Session, booking: ParkingBooking, now: datetime):
    """Refresh the cached count once ``booking`` stopped holding its slot."""
    db.flush()
    lot = db.get(ParkingLot, booking.lot_id)
    available = refresh_lot_availability(db, lot, now)
    logger.info("Released slot %s in lot '%s' (%s available)",
                booking.slot_number, lot.name, available)


def available_slots(db: Session, org_id: UUID, now: datetime) -> int:
    """Free slots right now across the organization's active lots."""
    return sum(refresh_lot_availability(db, lot, now) for lot in get_org_lots(db, org_id))

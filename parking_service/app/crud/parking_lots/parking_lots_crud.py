import logging
from contextlib import ExitStack
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.helpers.datetime_helper import utc_now
from shared.utils.app_status_code import AppStatusCode
from shared.core.exceptions import AppException
from ...core.exceptions import NotFoundError
from ...models.orgs import Org
from ...models.parking_lots import ParkingLot
from ...schemas.parking_lot_schemas import OrgAvailabilityOut, ParkingLotCreate, ParkingLotOut, ParkingLotUpdate
from . import slot_inventory

logger = logging.getLogger(__name__)


def to_lot_out(lot: ParkingLot) -> ParkingLotOut:
    return ParkingLotOut(
        lot_id=lot.id,
        org_id=lot.org_id,
        lot_name=lot.name,
        lot_description=lot.description,
        priority_order=lot.priority_order,
        total_slots=lot.total_slots,
        available_slots=lot.available_slots,
        is_active=lot.is_active,
        created_at=lot.created_at,
    )


def _get_org(db: Session, org_id: UUID) -> Org:
    org = db.get(Org, org_id)
    if not org:
        raise NotFoundError("Organization not found")
    return org


def get_parking_lots(db: Session, org_id: UUID, include_inactive: bool = False, now: datetime = None):
    _get_org(db, org_id)
    now = now or utc_now()

    lots = slot_inventory.get_org_lots(db, org_id, active_only=not include_inactive)
    for lot in lots:
        slot_inventory.refresh_lot_availability(db, lot, now)
    db.commit()

    return [to_lot_out(lot) for lot in lots]


def get_org_availability(db: Session, org_id: UUID, now: datetime = None) -> OrgAvailabilityOut:
    _get_org(db, org_id)
    now = now or utc_now()

    # also refreshes each lot's cached count
    available = slot_inventory.available_slots(db, org_id, now)
    db.commit()

    lots = [to_lot_out(lot) for lot in slot_inventory.get_org_lots(db, org_id)]
    total = sum(lot.total_slots for lot in lots)
    occupied = total - available

    return OrgAvailabilityOut(
        org_id=org_id,
        total_slots=total,
        available_slots=available,
        occupied_slots=occupied,
        occupancy_rate=round(occupied / total * 100, 2) if total else 0.0,
        lots=lots,
    )


def get_parking_lot(db: Session, lot_id: UUID) -> ParkingLot:
    lot = db.get(ParkingLot, lot_id)
    if not lot:
        raise NotFoundError("Parking lot not found")
    return lot


def create_parking_lot(db: Session, data: ParkingLotCreate) -> ParkingLotOut:
    _get_org(db, data.org_id)

    lot = ParkingLot(
        **data.model_dump(),
        available_slots=data.total_slots,
        is_active=True,
    )
    db.add(lot)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AppException(
            f"A parking lot named '{data.name}' already exists",
            status_code=AppStatusCode.INVALID_INPUT)
    db.refresh(lot)

    logger.info("Created lot '%s' with %s slots for org %s",
                lot.name, lot.total_slots, lot.org_id)
    return to_lot_out(lot)


def update_parking_lot(db: Session, lot_id: UUID, org_id: UUID, data: ParkingLotUpdate, now: datetime = None) -> ParkingLotOut:
    now = now or utc_now()

    with ExitStack() as stack:
        lot = get_parking_lot(db, lot_id)
        if org_id is not None and str(lot.org_id) != str(org_id):
            raise NotFoundError("Parking lot not found")

        # capacity changes must not interleave with allocation
        lot = slot_inventory.lock_lot(db, lot_id, stack)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(lot, key, value)
        slot_inventory.refresh_lot_availability(db, lot, now)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise AppException(
                "Parking lot update violates a constraint",
                status_code=AppStatusCode.INVALID_INPUT)

    db.refresh(lot)
    return to_lot_out(lot)


def deactivate_parking_lot(db: Session, lot_id: UUID, org_id: UUID) -> ParkingLotOut:
    return update_parking_lot(db, lot_id, org_id, ParkingLotUpdate(is_active=False))

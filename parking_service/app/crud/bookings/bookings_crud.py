"""Booking operations exposed to the routers.

Each public function is one transaction: it either commits every change it
made or rolls back and raises. Operations that read slot occupancy and then
write hold the lot guard from slot_inventory until after the commit.
"""
import json
import logging
from contextlib import ExitStack, contextmanager
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from shared.core.exceptions import AppException
from shared.core.schemas import UserToken
from shared.helpers.datetime_helper import to_naive_utc, utc_now
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import UserRole
from ...core.exceptions import (
    BookingError,
    InvalidStatusTransitionError,
    MemberOrganizationError,
    NotFoundError,
    SlotUnavailableError,
    StaleStateError,
)
from ...enum.booking_enum import BookingStatus, RequesterRole
from ...enum.payment_enum import PaymentPurpose
from ...models.booking_penalties import BookingPenalty
from ...models.bookings import ParkingBooking
from ...models.orgs import Org
from ...schemas.booking_schemas import (
    AutoExpireResult,
    BookingCreate,
    BookingListResponse,
    BookingOut,
    BookingRequest,
    ExtensionInfo,
    GateStatusOut,
    PayPenaltyRequest,
    PayPenaltyResult,
    PenaltyOut,
    PenaltyRecalcResult,
    QRScanResult,
    WalkInCreate,
)
from ..parking_lots import parking_lots_crud, slot_inventory
from ..payments import payments_crud
from ..payments.payment_gateway import PaymentGateway
from . import booking_lifecycle as lifecycle
from .penalty import PenaltyInfo, compute_penalty
from .pricing import compute_amount, duration_hours
from .validators import normalize_vehicle_number

logger = logging.getLogger(__name__)

STAFF_ROLES = (UserRole.WATCHMAN.value, UserRole.ORG_ADMIN.value)
VALID_AT_GATE = (BookingStatus.pending, BookingStatus.confirmed, BookingStatus.active)


@contextmanager
def _transaction(db: Session):
    try:
        yield
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("Concurrent booking update detected, rolled back")
        raise StaleStateError(
            "Booking was modified concurrently, reload and retry")
    except Exception:
        db.rollback()
        raise


# ----------------- Helpers -----------------
def to_booking_out(booking: ParkingBooking) -> BookingOut:
    out = BookingOut.model_validate(booking)
    out.lot_name = booking.lot.name if booking.lot else None
    return out


def to_penalty_out(penalty: BookingPenalty) -> PenaltyOut:
    return PenaltyOut.model_validate(penalty)


def is_staff_of(user: UserToken, org_id: UUID) -> bool:
    return user.role in STAFF_ROLES and user.org_id is not None and str(user.org_id) == str(org_id)


def ensure_org_staff(user: UserToken, org_id: UUID):
    if not is_staff_of(user, org_id):
        raise AppException("Access forbidden: staff of this organization only",
                           status_code=AppStatusCode.AUTHENTICATION_FORBIDDEN,
                           http_status=403)


def requester_role_for(user: UserToken) -> RequesterRole:
    if user.role == RequesterRole.organization_member.value:
        return RequesterRole.organization_member
    if user.role == RequesterRole.walk_in.value:
        return RequesterRole.walk_in
    return RequesterRole.visitor


def _get_org(db: Session, org_id: UUID) -> Org:
    org = db.get(Org, org_id)
    if not org:
        raise NotFoundError("Organization not found")
    return org


def _get_booking(db: Session, booking_id: UUID) -> ParkingBooking:
    booking = db.get(ParkingBooking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def _get_accessible_booking(db: Session, booking_id: UUID, user: UserToken) -> ParkingBooking:
    booking = _get_booking(db, booking_id)
    if booking.requester_id != user.user_id and not is_staff_of(user, booking.org_id):
        raise NotFoundError("Booking not found")
    return booking


def _lock_booking(db: Session, booking: ParkingBooking, stack: ExitStack) -> ParkingBooking:
    """Take the lot guard and fail if the booking changed since it was read."""
    seen_version = booking.version
    slot_inventory.lock_lot(db, booking.lot_id, stack)
    db.refresh(booking)
    if booking.version != seen_version:
        logger.warning("Booking %s changed while waiting for the lot guard (v%s -> v%s)",
                       booking.id, seen_version, booking.version)
        raise StaleStateError(
            "Booking was modified concurrently, reload and retry")
    return booking


def _qr_payload(booking: ParkingBooking) -> str:
    return json.dumps({
        "booking_id": str(booking.id),
        "org_id": str(booking.org_id),
        "lot_id": str(booking.lot_id),
        "slot_number": booking.slot_number,
        "vehicle_number": booking.vehicle_number,
        "start_time": booking.start_time.isoformat(),
        "end_time": booking.end_time.isoformat(),
    })


def _record_penalty(db: Session, booking: ParkingBooking, penalty: PenaltyInfo, assessed_at: datetime) -> BookingPenalty:
    record = booking.penalty
    if record is None:
        record = BookingPenalty(booking_id=booking.id)
        db.add(record)
        booking.penalty = record
    elif record.is_paid:
        return record

    record.overstay_minutes = penalty.overstay_minutes
    record.overstay_hours = penalty.overstay_hours
    record.penalty_amount = penalty.penalty_amount
    record.assessed_at = assessed_at
    lifecycle.apply_penalty(booking, penalty)
    return record


# ----------------- Queries -----------------
def get_booking(db: Session, booking_id: UUID, current_user: UserToken) -> BookingOut:
    return to_booking_out(_get_accessible_booking(db, booking_id, current_user))


def get_user_bookings(db: Session, user_id: str, current_user: UserToken) -> List[BookingOut]:
    query = db.query(ParkingBooking).filter(ParkingBooking.requester_id == user_id)

    if user_id != current_user.user_id:
        if current_user.role not in STAFF_ROLES:
            raise AppException("You can only view your own bookings",
                               status_code=AppStatusCode.AUTHENTICATION_FORBIDDEN,
                               http_status=403)
        query = query.filter(ParkingBooking.org_id == current_user.org_id)

    bookings = query.order_by(ParkingBooking.start_time.desc()).all()
    return [to_booking_out(b) for b in bookings]


def get_org_bookings(db: Session, org_id: UUID, params: BookingRequest) -> BookingListResponse:
    query = db.query(ParkingBooking).filter(ParkingBooking.org_id == org_id)

    if params.status:
        query = query.filter(ParkingBooking.status == params.status)
    if params.start_date:
        query = query.filter(func.date(ParkingBooking.start_time) >= params.start_date.isoformat())
    if params.end_date:
        query = query.filter(func.date(ParkingBooking.start_time) <= params.end_date.isoformat())
    if params.search:
        query = query.filter(ParkingBooking.vehicle_number.ilike(f"%{params.search}%"))

    total = query.count()
    bookings = (
        query.order_by(ParkingBooking.start_time.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return BookingListResponse(bookings=[to_booking_out(b) for b in bookings], total=total)


# ----------------- Create -----------------
def _create_booking(
    db: Session,
    stack: ExitStack,
    org: Org,
    requester_id: str,
    requester_role: RequesterRole,
    requester_org_id: Optional[UUID],
    vehicle_number: str,
    vehicle_type: str,
    start_time: datetime,
    end_time: datetime,
    now: datetime,
    entry_time: datetime = None
) -> ParkingBooking:
    lifecycle.validate_range(start_time, end_time, now)

    hours = duration_hours(start_time, end_time)
    amount = compute_amount(hours, org, requester_role, requester_org_id)

    lot, slot_number = slot_inventory.allocate_slot(db, org.id, start_time, end_time, stack)

    booking = ParkingBooking(
        org_id=org.id,
        lot_id=lot.id,
        slot_number=slot_number,
        requester_id=requester_id,
        requester_role=requester_role,
        requester_org_id=requester_org_id,
        vehicle_number=vehicle_number,
        vehicle_type=vehicle_type,
        start_time=start_time,
        end_time=end_time,
        duration_hours=hours,
        amount=amount,
        status=lifecycle.initial_status(amount, start_time, now),
        payment_status=lifecycle.initial_payment_status(amount),
        entry_time=entry_time,
        overstay_minutes=0,
        penalty_amount=Decimal("0.00"),
    )
    db.add(booking)
    db.flush()
    booking.qr_code_data = _qr_payload(booking)
    slot_inventory.refresh_lot_availability(db, lot, now)

    logger.info("Booking %s created: lot '%s' slot %s, %sh, amount %s, %s",
                booking.id, lot.name, slot_number, hours, amount, booking.status.value)
    return booking


def create_booking(db: Session, request: BookingCreate, current_user: UserToken, now: datetime = None) -> BookingOut:
    now = now or utc_now()
    org = _get_org(db, request.org_id)
    role = requester_role_for(current_user)

    if role == RequesterRole.organization_member and str(current_user.org_id) != str(org.id):
        raise MemberOrganizationError(
            "Members can only book parking at their own organization")

    vehicle_number = normalize_vehicle_number(request.vehicle_number)

    with ExitStack() as stack, _transaction(db):
        booking = _create_booking(
            db, stack, org,
            requester_id=current_user.user_id,
            requester_role=role,
            requester_org_id=current_user.org_id,
            vehicle_number=vehicle_number,
            vehicle_type=request.vehicle_type.value,
            start_time=to_naive_utc(request.start_time),
            end_time=to_naive_utc(request.end_time),
            now=now,
        )

    db.refresh(booking)
    return to_booking_out(booking)


def create_walk_in(db: Session, request: WalkInCreate, current_user: UserToken, now: datetime = None) -> BookingOut:
    """Assisted booking at the gate: starts now, vehicle already inside."""
    now = now or utc_now()
    org = _get_org(db, current_user.org_id)
    vehicle_number = normalize_vehicle_number(request.vehicle_number)

    with ExitStack() as stack, _transaction(db):
        booking = _create_booking(
            db, stack, org,
            requester_id=current_user.user_id,
            requester_role=RequesterRole.walk_in,
            requester_org_id=None,
            vehicle_number=vehicle_number,
            vehicle_type=request.vehicle_type.value,
            start_time=now,
            end_time=now + timedelta(hours=request.hours),
            now=now,
            entry_time=now,
        )

    db.refresh(booking)
    return to_booking_out(booking)


# ----------------- Cancel -----------------
def cancel_booking(db: Session, booking_id: UUID, current_user: UserToken, now: datetime = None) -> BookingOut:
    now = now or utc_now()
    booking = _get_accessible_booking(db, booking_id, current_user)

    with ExitStack() as stack, _transaction(db):
        _lock_booking(db, booking, stack)
        lifecycle.cancel(booking, now)
        slot_inventory.release_slot(db, booking, now)

    db.refresh(booking)
    return to_booking_out(booking)


# ----------------- Complete / entry / exit -----------------
def _assess_exit_penalty(db: Session, booking: ParkingBooking, exit_time: datetime):
    penalty = compute_penalty(booking.end_time, booking.org.visitor_hourly_rate, exit_time)
    _record_penalty(db, booking, penalty, assessed_at=exit_time)
    logger.warning("Booking %s exited %s min late, penalty %s",
                   booking.id, penalty.overstay_minutes, penalty.penalty_amount)


def mark_complete(
    db: Session,
    booking_id: UUID,
    current_user: UserToken,
    exit_time: datetime = None,
    now: datetime = None
) -> BookingOut:
    now = now or utc_now()
    exit_time = to_naive_utc(exit_time) or now
    booking = _get_accessible_booking(db, booking_id, current_user)

    with ExitStack() as stack, _transaction(db):
        _lock_booking(db, booking, stack)
        status = lifecycle.complete(booking, exit_time, now)
        if status == BookingStatus.overstay:
            _assess_exit_penalty(db, booking, exit_time)
        slot_inventory.release_slot(db, booking, now)

    db.refresh(booking)
    return to_booking_out(booking)


def update_booking_status(
    db: Session,
    booking_id: UUID,
    target: BookingStatus,
    current_user: UserToken,
    exit_time: datetime = None,
    now: datetime = None
) -> BookingOut:
    if target == BookingStatus.cancelled:
        return cancel_booking(db, booking_id, current_user, now=now)
    if target == BookingStatus.completed:
        return mark_complete(db, booking_id, current_user, exit_time=exit_time, now=now)
    raise InvalidStatusTransitionError(
        f"Status '{target.value}' cannot be requested directly")


def mark_entry(db: Session, booking_id: UUID, current_user: UserToken, entry_time: datetime = None, now: datetime = None) -> BookingOut:
    now = now or utc_now()
    entry_time = to_naive_utc(entry_time) or now
    booking = _get_accessible_booking(db, booking_id, current_user)

    with _transaction(db):
        lifecycle.mark_entry(booking, entry_time, now)

    db.refresh(booking)
    return to_booking_out(booking)


def mark_exit(db: Session, booking_id: UUID, current_user: UserToken, exit_time: datetime = None, now: datetime = None) -> BookingOut:
    """Gate exit: completes an active booking, or freezes the penalty of an overstay."""
    now = now or utc_now()
    exit_time = to_naive_utc(exit_time) or now
    booking = _get_accessible_booking(db, booking_id, current_user)

    if BookingStatus(booking.status) != BookingStatus.overstay:
        return mark_complete(db, booking_id, current_user, exit_time=exit_time, now=now)

    with ExitStack() as stack, _transaction(db):
        _lock_booking(db, booking, stack)
        if booking.exit_time is None:
            lifecycle.ensure_exit_time(booking, exit_time, now)
            booking.exit_time = exit_time
            _assess_exit_penalty(db, booking, exit_time)
            slot_inventory.release_slot(db, booking, now)

    db.refresh(booking)
    return to_booking_out(booking)


def scan_qr(db: Session, qr_code: str, current_user: UserToken, now: datetime = None) -> QRScanResult:
    now = now or utc_now()
    try:
        booking_id = UUID(json.loads(qr_code)["booking_id"])
    except (ValueError, KeyError, TypeError):
        raise AppException("Invalid QR code format",
                           status_code=AppStatusCode.INVALID_INPUT)

    booking = _get_accessible_booking(db, booking_id, current_user)
    status = BookingStatus(booking.status)

    reason = None
    if status not in VALID_AT_GATE:
        reason = f"Booking is {status.value}"
    elif now >= booking.end_time:
        reason = "Booking has ended"

    return QRScanResult(booking=to_booking_out(booking), valid=reason is None, reason=reason)


def get_gate_status(db: Session, current_user: UserToken, now: datetime = None, recent_limit: int = 10) -> GateStatusOut:
    """What the gate sees right now for the staff member's organization."""
    now = now or utc_now()
    org_id = current_user.org_id
    availability = parking_lots_crud.get_org_availability(db, org_id, now)

    bookings = db.query(ParkingBooking).filter(ParkingBooking.org_id == org_id)
    inside = (
        bookings.filter(ParkingBooking.status == BookingStatus.active,
                        ParkingBooking.entry_time.isnot(None))
        .order_by(ParkingBooking.entry_time.desc())
        .all()
    )
    overstays = (
        bookings.filter(ParkingBooking.status == BookingStatus.overstay,
                        ParkingBooking.exit_time.is_(None))
        .order_by(ParkingBooking.end_time.asc())
        .all()
    )
    recent_exits = (
        bookings.filter(ParkingBooking.exit_time.isnot(None))
        .order_by(ParkingBooking.exit_time.desc())
        .limit(recent_limit)
        .all()
    )

    return GateStatusOut(
        org_id=org_id,
        total_slots=availability.total_slots,
        available_slots=availability.available_slots,
        occupancy_rate=availability.occupancy_rate,
        vehicles_inside=[to_booking_out(b) for b in inside],
        overstays=[to_booking_out(b) for b in overstays],
        recent_exits=[to_booking_out(b) for b in recent_exits],
    )


# ----------------- Extend -----------------
def _additional_amount(booking: ParkingBooking, hours: int) -> Decimal:
    return compute_amount(hours, booking.org, booking.requester_role, booking.requester_org_id)


def check_extension(db: Session, booking_id: UUID, hours: int, current_user: UserToken, now: datetime = None) -> ExtensionInfo:
    now = now or utc_now()
    booking = _get_accessible_booking(db, booking_id, current_user)
    lifecycle.ensure_extendable(booking, now)

    new_end_time = booking.end_time + timedelta(hours=hours)
    can_extend = slot_inventory.is_slot_free(
        db, booking.lot_id, booking.slot_number,
        booking.end_time, new_end_time, exclude_booking_id=booking.id)

    return ExtensionInfo(
        booking_id=booking.id,
        can_extend_same_slot=can_extend,
        current_end_time=booking.end_time,
        new_end_time=new_end_time,
        additional_hours=hours,
        additional_amount=float(_additional_amount(booking, hours)),
    )


def extend_booking(db: Session, booking_id: UUID, hours: int, current_user: UserToken, now: datetime = None) -> BookingOut:
    now = now or utc_now()
    booking = _get_accessible_booking(db, booking_id, current_user)

    with ExitStack() as stack, _transaction(db):
        _lock_booking(db, booking, stack)
        lifecycle.ensure_extendable(booking, now)

        new_end_time = booking.end_time + timedelta(hours=hours)
        if not slot_inventory.is_slot_free(
                db, booking.lot_id, booking.slot_number,
                booking.end_time, new_end_time, exclude_booking_id=booking.id):
            logger.warning("Extension of booking %s rejected: slot %s taken",
                           booking.id, booking.slot_number)
            raise SlotUnavailableError(
                f"Slot {booking.slot_number} is not free until {new_end_time}")

        lifecycle.extend(booking, hours, _additional_amount(booking, hours))
        booking.qr_code_data = _qr_payload(booking)

    db.refresh(booking)
    return to_booking_out(booking)


# ----------------- Sweep -----------------
def _sweep_one(db: Session, booking_id: UUID, now: datetime) -> Optional[BookingStatus]:
    """Advance one booking; returns the new status or None when untouched."""
    booking = _get_booking(db, booking_id)

    with ExitStack() as stack, _transaction(db):
        _lock_booking(db, booking, stack)

        if lifecycle.should_activate(booking, now):
            lifecycle.activate(booking, now)
        if lifecycle.is_overdue(booking, now):
            penalty = compute_penalty(booking.end_time, booking.org.visitor_hourly_rate, now)
            lifecycle.flag_overstay(booking, penalty)
            _record_penalty(db, booking, penalty, assessed_at=now)

        if not db.is_modified(booking):
            return None
        return BookingStatus(booking.status)


def auto_expire_bookings(db: Session, now: datetime = None) -> AutoExpireResult:
    """Activate started bookings and flag overdue active ones as overstay.

    Running it again with the same clock changes nothing.
    """
    now = now or utc_now()

    candidate_ids = [
        row.id for row in db.query(ParkingBooking.id).filter(
            ParkingBooking.start_time <= now,
            ParkingBooking.status.in_(
                (BookingStatus.pending, BookingStatus.confirmed, BookingStatus.active)),
        ).all()
    ]

    expired = activated = 0
    for booking_id in candidate_ids:
        try:
            status = _sweep_one(db, booking_id, now)
        except StaleStateError:
            # a user transition won the race, it is current now
            continue
        if status == BookingStatus.overstay:
            expired += 1
        elif status == BookingStatus.active:
            activated += 1

    if expired or activated:
        logger.info("Sweep at %s: %s activated, %s overstay", now, activated, expired)
    return AutoExpireResult(expired_count=expired, activated_count=activated)


# ----------------- Penalty -----------------
def pay_penalty_and_rebook(
    db: Session,
    gateway: PaymentGateway,
    booking_id: UUID,
    request: PayPenaltyRequest,
    current_user: UserToken,
    now: datetime = None
) -> PayPenaltyResult:
    """Settle an overstay and optionally book the same vehicle again.

    A failed rebooking never undoes the penalty payment; it is reported in
    rebook_error instead.
    """
    now = now or utc_now()
    booking = _get_accessible_booking(db, booking_id, current_user)

    with ExitStack() as stack, _transaction(db):
        _lock_booking(db, booking, stack)
        if BookingStatus(booking.status) != BookingStatus.overstay:
            raise InvalidStatusTransitionError(
                f"No outstanding penalty: booking is '{BookingStatus(booking.status).value}'")

        assessed_at = booking.exit_time or now
        penalty = compute_penalty(booking.end_time, booking.org.visitor_hourly_rate, assessed_at)
        record = _record_penalty(db, booking, penalty, assessed_at=assessed_at)

        payment = payments_crud.charge(
            db, gateway, booking, current_user.user_id,
            Decimal(str(record.penalty_amount)), request.payment_method,
            PaymentPurpose.penalty, idempotency_key=f"{booking.id}:penalty")

        record.is_paid = True
        record.paid_at = now
        record.payment_id = payment.id
        if booking.exit_time is None:
            booking.exit_time = now
        lifecycle.settle_penalty(booking)
        slot_inventory.release_slot(db, booking, now)

    logger.info("Penalty %s paid for booking %s (%s)",
                record.penalty_amount, booking.id, payment.transaction_id)

    new_booking = None
    rebook_error = None
    if request.new_booking_start_time is not None:
        try:
            new_booking = _rebook(db, booking, current_user, request, now)
        except BookingError as exc:
            rebook_error = exc.message
            logger.warning("Rebooking after penalty for %s failed: %s", booking.id, exc.message)

    db.refresh(booking)
    return PayPenaltyResult(
        booking=to_booking_out(booking),
        penalty=to_penalty_out(booking.penalty),
        transaction_id=payment.transaction_id,
        new_booking=to_booking_out(new_booking) if new_booking else None,
        rebook_error=rebook_error,
    )


def _rebook(db: Session, original: ParkingBooking, current_user: UserToken,
            request: PayPenaltyRequest, now: datetime) -> ParkingBooking:
    with ExitStack() as stack, _transaction(db):
        new_booking = _create_booking(
            db, stack, original.org,
            requester_id=original.requester_id,
            requester_role=RequesterRole(original.requester_role),
            requester_org_id=original.requester_org_id,
            vehicle_number=original.vehicle_number,
            vehicle_type=original.vehicle_type,
            start_time=to_naive_utc(request.new_booking_start_time),
            end_time=to_naive_utc(request.new_booking_end_time),
            now=now,
        )
        original.rebooking_id = new_booking.id

    db.refresh(new_booking)
    return new_booking


def _reassess_one(db: Session, booking_id: UUID, now: datetime) -> bool:
    booking = _get_booking(db, booking_id)

    with ExitStack() as stack, _transaction(db):
        _lock_booking(db, booking, stack)
        if BookingStatus(booking.status) != BookingStatus.overstay or booking.exit_time is not None:
            return False

        penalty = compute_penalty(booking.end_time, booking.org.visitor_hourly_rate, now)
        if penalty.overstay_minutes == booking.overstay_minutes:
            return False
        _record_penalty(db, booking, penalty, assessed_at=now)
        return True


def recalculate_penalties(db: Session, org_id: UUID = None, now: datetime = None) -> PenaltyRecalcResult:
    """Bring the penalty of every overstay still inside up to ``now``.

    An overstay that has exited keeps the penalty frozen at its exit time.
    """
    now = now or utc_now()

    query = db.query(ParkingBooking.id).filter(
        ParkingBooking.status == BookingStatus.overstay,
        ParkingBooking.exit_time.is_(None),
    )
    if org_id is not None:
        query = query.filter(ParkingBooking.org_id == org_id)
    candidate_ids = [row.id for row in query.all()]

    updated = 0
    for booking_id in candidate_ids:
        try:
            if _reassess_one(db, booking_id, now):
                updated += 1
        except StaleStateError:
            continue

    if updated:
        logger.info("Penalties re-assessed at %s: %s of %s overstays changed",
                    now, updated, len(candidate_ids))
    return PenaltyRecalcResult(overstay_count=len(candidate_ids), updated_count=updated)


def get_penalty(db: Session, booking_id: UUID, current_user: UserToken, now: datetime = None) -> PenaltyOut:
    """Current penalty, live for an overstay that has not exited yet."""
    now = now or utc_now()
    booking = _get_accessible_booking(db, booking_id, current_user)

    if booking.penalty is not None and (booking.penalty.is_paid or booking.exit_time is not None):
        return to_penalty_out(booking.penalty)

    if BookingStatus(booking.status) != BookingStatus.overstay:
        return PenaltyOut(overstay_minutes=0, overstay_hours=0, penalty_amount=0)

    penalty = compute_penalty(booking.end_time, booking.org.visitor_hourly_rate, now)
    return PenaltyOut(
        overstay_minutes=penalty.overstay_minutes,
        overstay_hours=penalty.overstay_hours,
        penalty_amount=float(penalty.penalty_amount),
        assessed_at=now,
    )

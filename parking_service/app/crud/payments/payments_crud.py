import logging
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from shared.core.exceptions import AppException
from shared.core.schemas import UserToken
from shared.helpers.datetime_helper import utc_now
from ...core.exceptions import InvalidStatusTransitionError, NotFoundError, PaymentFailedError, StaleStateError
from ...enum.booking_enum import BookingPaymentStatus, BookingStatus
from ...enum.payment_enum import PaymentMethod, PaymentPurpose, PaymentStatus
from ...models.bookings import ParkingBooking
from ...models.payments import Payment
from ...schemas.payment_schemas import OrgRevenueOut, PaymentListResponse, PaymentOut
from ..bookings import booking_lifecycle as lifecycle
from .payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


def paid_total(db: Session, booking_id: UUID, purpose: PaymentPurpose) -> Decimal:
    total = db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
        Payment.booking_id == booking_id,
        Payment.purpose == purpose,
        Payment.status == PaymentStatus.success,
    ).scalar()
    return Decimal(str(total))


def charge(
    db: Session,
    gateway: PaymentGateway,
    booking: ParkingBooking,
    user_id: str,
    amount: Decimal,
    method: PaymentMethod,
    purpose: PaymentPurpose,
    idempotency_key: str
) -> Payment:
    """Charge through the gateway and stage the payment row; the caller commits."""
    existing = db.query(Payment).filter(
        Payment.idempotency_key == idempotency_key).first()
    if existing:
        return existing

    result = gateway.charge(amount, method, idempotency_key)
    if not result.success:
        raise PaymentFailedError(f"Payment failed: {result.message}")

    payment = Payment(
        booking_id=booking.id,
        user_id=user_id,
        amount=amount,
        method=method,
        purpose=purpose,
        status=PaymentStatus.success,
        transaction_id=result.transaction_id,
        idempotency_key=idempotency_key,
    )
    db.add(payment)
    db.flush()
    return payment


def pay_booking(
    db: Session,
    gateway: PaymentGateway,
    booking_id: UUID,
    method: PaymentMethod,
    current_user: UserToken,
    now: datetime = None
) -> PaymentOut:
    """Settle what is due on a booking; a pending booking becomes confirmed."""
    now = now or utc_now()

    booking = db.get(ParkingBooking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    status = BookingStatus(booking.status)
    if status in (BookingStatus.cancelled, BookingStatus.completed):
        raise InvalidStatusTransitionError(
            f"Cannot pay for a booking that is '{status.value}'")
    if booking.payment_status != BookingPaymentStatus.pending:
        raise AppException("Nothing is due on this booking")

    already_paid = paid_total(db, booking.id, PaymentPurpose.booking)
    due = Decimal(str(booking.amount)) - already_paid
    key = f"{booking.id}:booking:{already_paid}"

    try:
        payment = charge(db, gateway, booking, current_user.user_id, due,
                         method, PaymentPurpose.booking, key)

        booking.payment_status = BookingPaymentStatus.paid
        if status == BookingStatus.pending:
            if lifecycle.should_activate(booking, now):
                lifecycle.activate(booking, now)
            else:
                lifecycle.transition(booking, BookingStatus.confirmed)
        db.commit()
    except StaleDataError:
        db.rollback()
        raise StaleStateError(
            "Booking was modified concurrently, reload and retry")
    except Exception:
        db.rollback()
        raise

    db.refresh(payment)
    logger.info("Booking %s paid (%s)", booking.id, payment.transaction_id)
    return PaymentOut.model_validate(payment)


def get_booking_payments(db: Session, booking_id: UUID) -> PaymentListResponse:
    payments = (
        db.query(Payment)
        .filter(Payment.booking_id == booking_id)
        .order_by(Payment.created_at.desc())
        .all()
    )
    return PaymentListResponse(
        payments=[PaymentOut.model_validate(p) for p in payments],
        total=len(payments),
    )


def get_user_payments(db: Session, user_id: str, skip: int = 0, limit: int = 100) -> PaymentListResponse:
    query = db.query(Payment).filter(Payment.user_id == user_id)
    total = query.count()
    payments = query.order_by(Payment.created_at.desc()).offset(skip).limit(limit).all()
    return PaymentListResponse(
        payments=[PaymentOut.model_validate(p) for p in payments],
        total=total,
    )


def get_org_revenue(db: Session, org_id: UUID, start_date: date = None, end_date: date = None) -> OrgRevenueOut:
    """Successful payments on the organization's bookings, split by purpose."""
    query = (
        db.query(Payment.purpose,
                 func.count(Payment.id),
                 func.coalesce(func.sum(Payment.amount), 0))
        .join(ParkingBooking, ParkingBooking.id == Payment.booking_id)
        .filter(ParkingBooking.org_id == org_id,
                Payment.status == PaymentStatus.success)
    )
    if start_date:
        query = query.filter(func.date(Payment.created_at) >= start_date.isoformat())
    if end_date:
        query = query.filter(func.date(Payment.created_at) <= end_date.isoformat())

    revenue = {purpose: Decimal("0") for purpose in PaymentPurpose}
    count = 0
    for purpose, purpose_count, amount in query.group_by(Payment.purpose).all():
        revenue[PaymentPurpose(purpose)] = Decimal(str(amount))
        count += purpose_count

    return OrgRevenueOut(
        org_id=org_id,
        start_date=start_date,
        end_date=end_date,
        booking_revenue=float(revenue[PaymentPurpose.booking]),
        penalty_revenue=float(revenue[PaymentPurpose.penalty]),
        total_revenue=float(sum(revenue.values())),
        payment_count=count,
    )

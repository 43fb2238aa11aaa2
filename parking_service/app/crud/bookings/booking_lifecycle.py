"""Booking state machine.

Every status change goes through transition(); the guards for each
operation live next to it. Functions mutate the ORM instance but never
commit: the caller owns the transaction.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal

from shared.core.config import settings
from ...core.exceptions import (
    CancellationWindowClosedError,
    InvalidRangeError,
    InvalidStatusTransitionError,
)
from ...enum.booking_enum import BookingPaymentStatus, BookingStatus
from .penalty import PenaltyInfo

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.active, BookingStatus.cancelled},
    BookingStatus.confirmed: {BookingStatus.active, BookingStatus.cancelled},
    BookingStatus.active: {BookingStatus.completed, BookingStatus.overstay},
    BookingStatus.overstay: {BookingStatus.completed},
    BookingStatus.completed: set(),
    BookingStatus.cancelled: set(),
}

EXTENDABLE_STATUSES = (BookingStatus.confirmed, BookingStatus.active)


def transition(booking, target: BookingStatus):
    current = BookingStatus(booking.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(
            f"Booking cannot move from '{current.value}' to '{target.value}'")

    booking.status = target
    logger.info("Booking %s: %s -> %s", booking.id, current.value, target.value)


def initial_status(amount: Decimal, start_time: datetime, now: datetime) -> BookingStatus:
    if start_time <= now:
        return BookingStatus.active
    if amount == 0:
        return BookingStatus.confirmed
    return BookingStatus.pending


def initial_payment_status(amount: Decimal) -> BookingPaymentStatus:
    if amount == 0:
        return BookingPaymentStatus.not_required
    return BookingPaymentStatus.pending


def validate_range(start_time: datetime, end_time: datetime, now: datetime):
    if end_time <= start_time:
        raise InvalidRangeError("End time must be after start time")
    if start_time < now:
        raise InvalidRangeError("Start time cannot be in the past")


# ----------------- Cancel -----------------
def cancellation_deadline(booking) -> datetime:
    return booking.start_time - timedelta(minutes=settings.CANCELLATION_BUFFER_MINUTES)


def ensure_can_cancel(booking, now: datetime):
    status = BookingStatus(booking.status)
    if status == BookingStatus.active:
        raise CancellationWindowClosedError(
            "Cannot cancel a booking that has already started")
    if status not in (BookingStatus.pending, BookingStatus.confirmed):
        raise InvalidStatusTransitionError(
            f"Cannot cancel a booking that is '{status.value}'")
    if not now < cancellation_deadline(booking):
        raise CancellationWindowClosedError(
            f"Cannot cancel within {settings.CANCELLATION_BUFFER_MINUTES} minutes of start time")


def cancel(booking, now: datetime):
    ensure_can_cancel(booking, now)
    transition(booking, BookingStatus.cancelled)


# ----------------- Activation -----------------
def should_activate(booking, now: datetime) -> bool:
    return (
        BookingStatus(booking.status) in (BookingStatus.pending, BookingStatus.confirmed)
        and booking.start_time <= now
    )


def activate(booking, now: datetime):
    if booking.start_time > now:
        raise InvalidStatusTransitionError(
            "Booking cannot become active before its start time")
    transition(booking, BookingStatus.active)


def mark_entry(booking, entry_time: datetime, now: datetime):
    status = BookingStatus(booking.status)
    if status not in (BookingStatus.pending, BookingStatus.confirmed, BookingStatus.active):
        raise InvalidStatusTransitionError(
            f"Cannot record entry for a booking that is '{status.value}'")
    if entry_time >= booking.end_time:
        raise InvalidStatusTransitionError(
            "Cannot record entry after the booking has ended")
    if entry_time > now:
        raise InvalidRangeError("Entry time cannot be in the future")

    booking.entry_time = entry_time
    if status != BookingStatus.active:
        activate(booking, entry_time)


# ----------------- Overstay -----------------
def is_overdue(booking, now: datetime) -> bool:
    return BookingStatus(booking.status) == BookingStatus.active and now > booking.end_time


def apply_penalty(booking, penalty: PenaltyInfo):
    booking.overstay_minutes = penalty.overstay_minutes
    booking.penalty_amount = penalty.penalty_amount


def flag_overstay(booking, penalty: PenaltyInfo):
    transition(booking, BookingStatus.overstay)
    apply_penalty(booking, penalty)


# ----------------- Complete -----------------
def ensure_exit_time(booking, exit_time: datetime, now: datetime):
    earliest = max(booking.start_time, booking.entry_time or booking.start_time)
    if exit_time < earliest:
        raise InvalidRangeError(
            "Exit time cannot be before the booking start or the recorded entry")
    if exit_time > now:
        raise InvalidRangeError("Exit time cannot be in the future")


def complete(booking, exit_time: datetime, now: datetime) -> BookingStatus:
    """Record the exit and finish an active booking.

    Exiting after end_time does not complete the booking: it is moved to
    overstay and stays there until the penalty is paid.
    """
    status = BookingStatus(booking.status)
    if status != BookingStatus.active:
        raise InvalidStatusTransitionError(
            f"Only active bookings can be completed, this one is '{status.value}'")
    ensure_exit_time(booking, exit_time, now)

    booking.exit_time = exit_time
    if exit_time > booking.end_time:
        transition(booking, BookingStatus.overstay)
    else:
        transition(booking, BookingStatus.completed)
    return BookingStatus(booking.status)


def settle_penalty(booking):
    status = BookingStatus(booking.status)
    if status != BookingStatus.overstay:
        raise InvalidStatusTransitionError(
            f"No outstanding penalty: booking is '{status.value}'")
    transition(booking, BookingStatus.completed)


# ----------------- Extend -----------------
def ensure_extendable(booking, now: datetime):
    status = BookingStatus(booking.status)
    if status not in EXTENDABLE_STATUSES:
        raise InvalidStatusTransitionError(
            f"Cannot extend a booking that is '{status.value}'")
    if now >= booking.end_time:
        raise InvalidStatusTransitionError(
            "Cannot extend a booking that has already ended")


def extend(booking, hours: int, additional_amount: Decimal):
    new_end_time = booking.end_time + timedelta(hours=hours)
    if new_end_time <= booking.start_time:
        raise InvalidRangeError("End time must be after start time")

    booking.end_time = new_end_time
    booking.duration_hours = booking.duration_hours + hours
    booking.amount = Decimal(str(booking.amount)) + additional_amount
    if additional_amount > 0:
        booking.payment_status = BookingPaymentStatus.pending
    logger.info("Booking %s extended by %sh to %s", booking.id, hours, new_end_time)

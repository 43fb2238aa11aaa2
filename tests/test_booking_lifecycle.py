import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from parking_service.app.core.exceptions import (
    CancellationWindowClosedError,
    InvalidRangeError,
    InvalidStatusTransitionError,
)
from parking_service.app.crud.bookings import booking_lifecycle as lifecycle
from parking_service.app.crud.bookings.penalty import PenaltyInfo
from parking_service.app.enum.booking_enum import BookingPaymentStatus, BookingStatus

START = datetime(2026, 3, 2, 9, 0)
END = datetime(2026, 3, 2, 11, 0)


def make_booking(status=BookingStatus.confirmed, amount="100.00"):
    return SimpleNamespace(
        id=uuid.uuid4(),
        status=status,
        start_time=START,
        end_time=END,
        duration_hours=2,
        amount=Decimal(amount),
        payment_status=BookingPaymentStatus.pending,
        entry_time=None,
        exit_time=None,
        overstay_minutes=0,
        penalty_amount=Decimal("0.00"),
    )


def test_initial_status():
    assert lifecycle.initial_status(Decimal("100"), START, START - timedelta(hours=1)) == BookingStatus.pending
    assert lifecycle.initial_status(Decimal("0"), START, START - timedelta(hours=1)) == BookingStatus.confirmed
    assert lifecycle.initial_status(Decimal("100"), START, START) == BookingStatus.active


def test_validate_range_rejects_inverted_and_past_ranges():
    with pytest.raises(InvalidRangeError):
        lifecycle.validate_range(START, START, START - timedelta(hours=1))
    with pytest.raises(InvalidRangeError):
        lifecycle.validate_range(START, END, START + timedelta(minutes=1))


def test_terminal_states_reject_every_transition():
    for status in (BookingStatus.completed, BookingStatus.cancelled):
        booking = make_booking(status)
        for target in BookingStatus:
            with pytest.raises(InvalidStatusTransitionError):
                lifecycle.transition(booking, target)


def test_cancel_more_than_five_minutes_before_start():
    booking = make_booking()
    lifecycle.cancel(booking, START - timedelta(minutes=6))
    assert booking.status == BookingStatus.cancelled


def test_cancel_inside_buffer_leaves_booking_unchanged():
    booking = make_booking()
    with pytest.raises(CancellationWindowClosedError) as exc:
        lifecycle.cancel(booking, START - timedelta(minutes=3))
    assert "5 minutes" in exc.value.message
    assert booking.status == BookingStatus.confirmed


def test_cancel_exactly_at_buffer_is_rejected():
    booking = make_booking(BookingStatus.pending)
    with pytest.raises(CancellationWindowClosedError):
        lifecycle.cancel(booking, START - timedelta(minutes=5))


def test_cancel_active_booking_is_window_closed():
    with pytest.raises(CancellationWindowClosedError):
        lifecycle.cancel(make_booking(BookingStatus.active), START - timedelta(hours=1))


def test_cancel_completed_booking_is_invalid_transition():
    with pytest.raises(InvalidStatusTransitionError):
        lifecycle.cancel(make_booking(BookingStatus.completed), START - timedelta(hours=1))


def test_activation_waits_for_start():
    booking = make_booking()
    assert not lifecycle.should_activate(booking, START - timedelta(seconds=1))
    assert lifecycle.should_activate(booking, START)
    with pytest.raises(InvalidStatusTransitionError):
        lifecycle.activate(booking, START - timedelta(seconds=1))


def test_mark_entry_activates_booking():
    booking = make_booking()
    lifecycle.mark_entry(booking, START + timedelta(minutes=2), START + timedelta(minutes=2))
    assert booking.status == BookingStatus.active
    assert booking.entry_time == START + timedelta(minutes=2)


def test_complete_before_end():
    booking = make_booking(BookingStatus.active)
    assert lifecycle.complete(booking, END - timedelta(minutes=10), END) == BookingStatus.completed
    assert booking.exit_time == END - timedelta(minutes=10)


def test_complete_after_end_routes_to_overstay():
    booking = make_booking(BookingStatus.active)
    assert lifecycle.complete(booking, END + timedelta(minutes=20), END + timedelta(minutes=20)) == BookingStatus.overstay


def test_complete_requires_active():
    with pytest.raises(InvalidStatusTransitionError):
        lifecycle.complete(make_booking(BookingStatus.confirmed), START + timedelta(hours=1), END)


def test_exit_before_start_or_entry_is_rejected():
    booking = make_booking(BookingStatus.active)
    with pytest.raises(InvalidRangeError):
        lifecycle.complete(booking, START - timedelta(hours=3), START + timedelta(minutes=5))

    booking.entry_time = START + timedelta(minutes=30)
    with pytest.raises(InvalidRangeError):
        lifecycle.complete(booking, START + timedelta(minutes=10), START + timedelta(hours=1))
    assert booking.status == BookingStatus.active
    assert booking.exit_time is None


def test_exit_in_the_future_is_rejected():
    booking = make_booking(BookingStatus.active)
    with pytest.raises(InvalidRangeError):
        lifecycle.complete(booking, END + timedelta(hours=2), START + timedelta(hours=1))
    assert booking.status == BookingStatus.active


def test_entry_in_the_future_is_rejected():
    booking = make_booking()
    with pytest.raises(InvalidRangeError):
        lifecycle.mark_entry(booking, START + timedelta(minutes=30), START + timedelta(minutes=5))
    assert booking.entry_time is None


def test_overstay_then_settle():
    booking = make_booking(BookingStatus.active)
    assert lifecycle.is_overdue(booking, END + timedelta(minutes=1))
    lifecycle.flag_overstay(booking, PenaltyInfo(45, 1, Decimal("100.00")))
    assert booking.status == BookingStatus.overstay
    assert booking.overstay_minutes == 45
    assert booking.penalty_amount == Decimal("100.00")

    lifecycle.settle_penalty(booking)
    assert booking.status == BookingStatus.completed


def test_extend_updates_range_and_amount():
    booking = make_booking(BookingStatus.active)
    booking.payment_status = BookingPaymentStatus.paid
    lifecycle.ensure_extendable(booking, START + timedelta(hours=1))
    lifecycle.extend(booking, 1, Decimal("50.00"))

    assert booking.end_time == END + timedelta(hours=1)
    assert booking.end_time > booking.start_time
    assert booking.duration_hours == 3
    assert booking.amount == Decimal("150.00")
    assert booking.payment_status == BookingPaymentStatus.pending


def test_extend_rejected_after_end_or_from_pending():
    with pytest.raises(InvalidStatusTransitionError):
        lifecycle.ensure_extendable(make_booking(BookingStatus.active), END)
    with pytest.raises(InvalidStatusTransitionError):
        lifecycle.ensure_extendable(make_booking(BookingStatus.pending), START)

from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from parking_service.app.core.exceptions import InvalidRangeError
from parking_service.app.crud.bookings import bookings_crud as crud
from parking_service.app.crud.overview import dashboard_crud
from parking_service.app.crud.payments import payments_crud
from parking_service.app.crud.payments.payment_gateway import SimulatedPaymentGateway
from parking_service.app.crud.scheduler.scheduler_service import process_booking_expiry
from parking_service.app.enum.booking_enum import BookingStatus
from parking_service.app.enum.payment_enum import PaymentMethod
from parking_service.app.schemas.booking_schemas import BookingCreate, PayPenaltyRequest

NOW = datetime(2026, 3, 2, 7, 0)
NINE = datetime(2026, 3, 2, 9, 0)
TEN = datetime(2026, 3, 2, 10, 0)
ELEVEN = datetime(2026, 3, 2, 11, 0)
PAID_AT = TEN + timedelta(minutes=45)


def book(db, org, user, start, end, vehicle):
    request = BookingCreate(org_id=org.id, vehicle_number=vehicle,
                            start_time=start, end_time=end)
    return crud.create_booking(db, request, user, now=NOW)


@pytest.fixture
def org(make_org, make_lot):
    org = make_org(rate="40.00")
    make_lot(org, total_slots=3)
    return org


@pytest.fixture
def watchman(org, make_user):
    return make_user("watchman", org_id=org.id)


@pytest.fixture
def morning(db, org, make_user, watchman):
    """A paid visitor still inside, a member overstaying and a settled overstay."""
    gateway = SimulatedPaymentGateway()
    visitor, member, late_visitor = make_user(), make_user("organization_member", org_id=org.id), make_user()

    inside = book(db, org, visitor, NINE, ELEVEN, "KA01AB1111")
    payments_crud.pay_booking(db, gateway, inside.id, PaymentMethod.upi, visitor, now=NOW)
    overstaying = book(db, org, member, NINE, TEN, "KA01AB2222")
    settled = book(db, org, late_visitor, NINE, TEN, "KA01AB3333")

    crud.mark_entry(db, inside.id, watchman, entry_time=NINE + timedelta(minutes=5),
                    now=NINE + timedelta(minutes=5))
    crud.auto_expire_bookings(db, now=TEN + timedelta(minutes=30))
    crud.pay_penalty_and_rebook(db, gateway, settled.id,
                                PayPenaltyRequest(payment_method=PaymentMethod.cash),
                                late_visitor, now=PAID_AT)

    return SimpleNamespace(inside=inside, overstaying=overstaying, settled=settled, member=member)


# ----------------- Dashboard -----------------
def test_dashboard_counts_occupancy_and_revenue(db, org, morning):
    dashboard = dashboard_crud.get_org_dashboard(db, org.id, now=PAID_AT)

    assert dashboard.total_bookings == 3
    assert dashboard.today_bookings == 3
    assert dashboard.bookings_by_status["active"] == 1
    assert dashboard.bookings_by_status["overstay"] == 1
    assert dashboard.bookings_by_status["completed"] == 1
    assert dashboard.bookings_by_status["cancelled"] == 0

    assert (dashboard.total_slots, dashboard.available_slots) == (3, 1)
    assert dashboard.occupancy_rate == 66.67

    # 2h at 40, plus 45 minutes late charged as one hour at twice the rate
    assert dashboard.booking_revenue == 80
    assert dashboard.penalty_revenue == 80
    assert dashboard.total_revenue == 160
    assert dashboard.unpaid_penalty_count == 1
    assert dashboard.unpaid_penalty_amount == 80


def test_analytics_groups_bookings_by_day(db, org, morning):
    analytics = dashboard_crud.get_org_analytics(db, org.id, now=PAID_AT)

    assert analytics.end_date == date(2026, 3, 2)
    assert analytics.start_date == date(2026, 1, 31)
    assert analytics.total_bookings == 3
    assert (analytics.member_bookings, analytics.visitor_bookings, analytics.walk_in_bookings) == (1, 2, 0)
    assert analytics.overstay_rate == 66.67
    assert len(analytics.daily) == 1
    assert analytics.daily[0].day == date(2026, 3, 2)
    assert analytics.daily[0].bookings == 3
    assert analytics.daily[0].booked_amount == 120


def test_analytics_outside_range_is_empty(db, org, morning):
    analytics = dashboard_crud.get_org_analytics(
        db, org.id, start_date=date(2026, 3, 3), end_date=date(2026, 3, 9))

    assert analytics.total_bookings == 0
    assert analytics.overstay_rate == 0
    assert analytics.daily == []


def test_analytics_rejects_reversed_range(db, org):
    with pytest.raises(InvalidRangeError):
        dashboard_crud.get_org_analytics(db, org.id, start_date=date(2026, 3, 9), end_date=date(2026, 3, 1))


# ----------------- Revenue -----------------
def test_revenue_split_by_purpose(db, org, morning):
    revenue = payments_crud.get_org_revenue(db, org.id)

    assert revenue.booking_revenue == 80
    assert revenue.penalty_revenue == 80
    assert revenue.total_revenue == 160
    assert revenue.payment_count == 2


def test_revenue_outside_date_range_is_zero(db, org, morning):
    revenue = payments_crud.get_org_revenue(db, org.id, end_date=date(2000, 1, 1))

    assert revenue.total_revenue == 0
    assert revenue.payment_count == 0


def test_revenue_of_other_org_is_separate(db, org, morning, make_org):
    other = make_org(name="Other Plaza")
    assert payments_crud.get_org_revenue(db, other.id).total_revenue == 0


# ----------------- Gate status -----------------
def test_gate_status_lists_vehicles_inside_overstays_and_exits(db, org, morning, watchman):
    status = crud.get_gate_status(db, watchman, now=PAID_AT)

    assert [b.id for b in status.vehicles_inside] == [morning.inside.id]
    assert [b.id for b in status.overstays] == [morning.overstaying.id]
    assert [b.id for b in status.recent_exits] == [morning.settled.id]
    assert status.recent_exits[0].exit_time == PAID_AT
    assert (status.total_slots, status.available_slots) == (3, 1)


# ----------------- Penalty re-assessment -----------------
def test_recalculate_penalties_accrues_while_vehicle_is_inside(db, org, morning):
    later = TEN + timedelta(minutes=90)

    result = crud.recalculate_penalties(db, org_id=org.id, now=later)
    assert (result.overstay_count, result.updated_count) == (1, 1)

    booking = crud.get_booking(db, morning.overstaying.id, morning.member)
    assert booking.overstay_minutes == 90
    # two started hours at twice the rate
    assert booking.penalty_amount == 2 * 2 * 40

    again = crud.recalculate_penalties(db, org_id=org.id, now=later)
    assert again.updated_count == 0


def test_recalculate_penalties_keeps_exit_penalty_frozen(db, org, morning, watchman):
    crud.mark_exit(db, morning.overstaying.id, watchman, exit_time=TEN + timedelta(minutes=40),
                   now=TEN + timedelta(minutes=40))

    result = crud.recalculate_penalties(db, org_id=org.id, now=TEN + timedelta(hours=5))

    assert result.overstay_count == 0
    booking = crud.get_booking(db, morning.overstaying.id, morning.member)
    assert booking.overstay_minutes == 40
    assert booking.penalty_amount == 80


def test_scheduled_sweep_also_reassesses_penalties(db, org, morning):
    result = process_booking_expiry(db, now=TEN + timedelta(hours=2, minutes=1))

    assert result.expired_count == 1
    overstaying = crud.get_booking(db, morning.overstaying.id, morning.member)
    assert overstaying.status == BookingStatus.overstay
    assert overstaying.overstay_minutes == 121
    assert overstaying.penalty_amount == 3 * 2 * 40

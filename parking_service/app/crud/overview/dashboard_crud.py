from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.helpers.datetime_helper import utc_now
from ...core.exceptions import InvalidRangeError
from ...enum.booking_enum import BookingStatus, RequesterRole
from ...models.booking_penalties import BookingPenalty
from ...models.bookings import ParkingBooking
from ...schemas.dashboard_schemas import DailyBookings, OrgAnalyticsOut, OrgDashboardOut
from ..organizations import orgs_crud
from ..parking_lots import parking_lots_crud
from ..payments import payments_crud

ANALYTICS_DEFAULT_DAYS = 30


def get_org_dashboard(db: Session, org_id: UUID, now: datetime = None) -> OrgDashboardOut:
    now = now or utc_now()

    # ------------------- Occupancy -------------------
    availability = parking_lots_crud.get_org_availability(db, org_id, now)

    # ------------------- Bookings -------------------
    by_status = {status.value: 0 for status in BookingStatus}
    status_rows = (
        db.query(ParkingBooking.status, func.count(ParkingBooking.id))
        .filter(ParkingBooking.org_id == org_id)
        .group_by(ParkingBooking.status)
        .all()
    )
    for status, count in status_rows:
        by_status[BookingStatus(status).value] = count

    today_bookings = db.query(func.count(ParkingBooking.id))\
        .filter(ParkingBooking.org_id == org_id,
                func.date(ParkingBooking.start_time) == now.date().isoformat())\
        .scalar() or 0

    # ------------------- Revenue -------------------
    revenue = payments_crud.get_org_revenue(db, org_id)

    # ------------------- Unpaid penalties -------------------
    unpaid_count, unpaid_amount = (
        db.query(func.count(BookingPenalty.id),
                 func.coalesce(func.sum(BookingPenalty.penalty_amount), 0))
        .join(ParkingBooking, ParkingBooking.id == BookingPenalty.booking_id)
        .filter(ParkingBooking.org_id == org_id, BookingPenalty.is_paid == False)
        .one()
    )

    return OrgDashboardOut(
        org_id=org_id,
        total_bookings=sum(by_status.values()),
        today_bookings=today_bookings,
        bookings_by_status=by_status,
        total_slots=availability.total_slots,
        available_slots=availability.available_slots,
        occupancy_rate=availability.occupancy_rate,
        booking_revenue=revenue.booking_revenue,
        penalty_revenue=revenue.penalty_revenue,
        total_revenue=revenue.total_revenue,
        unpaid_penalty_count=unpaid_count,
        unpaid_penalty_amount=float(unpaid_amount),
    )


def get_org_analytics(
    db: Session,
    org_id: UUID,
    start_date: date = None,
    end_date: date = None,
    now: datetime = None
) -> OrgAnalyticsOut:
    """Per-day booking counts and booked amounts between two dates, inclusive."""
    now = now or utc_now()
    end_date = end_date or now.date()
    start_date = start_date or end_date - timedelta(days=ANALYTICS_DEFAULT_DAYS)
    if start_date > end_date:
        raise InvalidRangeError("start_date must not be after end_date")

    orgs_crud.get_org(db, org_id)
    bookings = (
        db.query(ParkingBooking)
        .filter(ParkingBooking.org_id == org_id,
                func.date(ParkingBooking.start_time) >= start_date.isoformat(),
                func.date(ParkingBooking.start_time) <= end_date.isoformat())
        .all()
    )

    roles = Counter(RequesterRole(b.requester_role) for b in bookings)
    statuses = Counter(BookingStatus(b.status) for b in bookings)

    per_day = defaultdict(lambda: [0, Decimal("0")])
    for booking in bookings:
        day = per_day[booking.start_time.date()]
        day[0] += 1
        # cancelled bookings were never owed
        if BookingStatus(booking.status) != BookingStatus.cancelled:
            day[1] += Decimal(str(booking.amount))

    # overstays that were settled end up completed but keep their penalty record
    overstayed = sum(1 for b in bookings if b.penalty is not None)
    total = len(bookings)

    return OrgAnalyticsOut(
        org_id=org_id,
        start_date=start_date,
        end_date=end_date,
        total_bookings=total,
        member_bookings=roles[RequesterRole.organization_member],
        visitor_bookings=roles[RequesterRole.visitor],
        walk_in_bookings=roles[RequesterRole.walk_in],
        cancelled_bookings=statuses[BookingStatus.cancelled],
        overstay_rate=round(overstayed / total * 100, 2) if total else 0.0,
        daily=[
            DailyBookings(day=day, bookings=count, booked_amount=float(amount))
            for day, (count, amount) in sorted(per_day.items())
        ],
    )

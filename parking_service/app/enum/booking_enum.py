from enum import Enum


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"
    overstay = "overstay"


# statuses that keep a slot reserved
SLOT_HOLDING_STATUSES = (
    BookingStatus.pending,
    BookingStatus.confirmed,
    BookingStatus.active,
    BookingStatus.overstay,
)


class RequesterRole(str, Enum):
    organization_member = "organization_member"
    visitor = "visitor"
    walk_in = "walk_in"


class VehicleType(str, Enum):
    two_wheeler = "2-wheeler"
    four_wheeler = "4-wheeler"
    bicycle = "bicycle"
    heavy_vehicle = "heavy-vehicle"


class BookingPaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    not_required = "not_required"

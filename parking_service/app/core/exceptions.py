from shared.core.exceptions import AppException
from shared.utils.app_status_code import AppStatusCode


class BookingError(AppException):
    pass


class InvalidRangeError(BookingError):
    status_code = AppStatusCode.BOOKING_INVALID_RANGE
    http_status = 400


class InvalidVehicleNumberError(BookingError):
    status_code = AppStatusCode.BOOKING_INVALID_VEHICLE_NUMBER
    http_status = 400


class NoCapacityError(BookingError):
    status_code = AppStatusCode.BOOKING_NO_CAPACITY
    http_status = 409


class CancellationWindowClosedError(BookingError):
    status_code = AppStatusCode.BOOKING_CANCELLATION_WINDOW_CLOSED
    http_status = 409


class SlotUnavailableError(BookingError):
    status_code = AppStatusCode.BOOKING_SLOT_UNAVAILABLE
    http_status = 409


class StaleStateError(BookingError):
    status_code = AppStatusCode.BOOKING_STALE_STATE
    http_status = 409


class InvalidStatusTransitionError(BookingError):
    status_code = AppStatusCode.BOOKING_INVALID_TRANSITION
    http_status = 409


class MemberOrganizationError(BookingError):
    status_code = AppStatusCode.BOOKING_MEMBER_ORGANIZATION_MISMATCH
    http_status = 403


class NotFoundError(AppException):
    status_code = AppStatusCode.NOT_FOUND
    http_status = 404


class PaymentFailedError(AppException):
    status_code = AppStatusCode.PAYMENT_FAILED
    http_status = 402

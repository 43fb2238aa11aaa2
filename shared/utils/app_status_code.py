class AppStatusCode:
    # success
    OPERATION_SUCCESSFUL = "100"
    DATA_RETRIEVED_SUCCESSFULLY = "101"
    CREATED_SUCCESSFULLY = "102"
    UPDATED_SUCCESSFULLY = "103"

    # generic failures
    OPERATION_FAILED = "200"
    INVALID_INPUT = "201"
    REQUIRED_VALIDATION_ERROR = "202"
    NOT_FOUND = "203"
    STORAGE_UNAVAILABLE = "204"

    # authentication
    AUTHENTICATION_TOKEN_INVALID = "300"
    AUTHENTICATION_TOKEN_EXPIRED = "301"
    AUTHENTICATION_FORBIDDEN = "302"

    # booking rules
    BOOKING_INVALID_RANGE = "400"
    BOOKING_INVALID_VEHICLE_NUMBER = "401"
    BOOKING_NO_CAPACITY = "402"
    BOOKING_CANCELLATION_WINDOW_CLOSED = "403"
    BOOKING_SLOT_UNAVAILABLE = "404"
    BOOKING_STALE_STATE = "405"
    BOOKING_INVALID_TRANSITION = "406"
    BOOKING_MEMBER_ORGANIZATION_MISMATCH = "407"

    # payments
    PAYMENT_FAILED = "500"

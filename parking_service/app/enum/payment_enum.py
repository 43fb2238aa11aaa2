from enum import Enum


class PaymentMethod(str, Enum):
    online = "online"
    cash = "cash"
    upi = "upi"
    card = "card"
    net_banking = "net_banking"
    free = "free"


class PaymentPurpose(str, Enum):
    booking = "booking"
    penalty = "penalty"


class PaymentStatus(str, Enum):
    success = "success"
    failed = "failed"

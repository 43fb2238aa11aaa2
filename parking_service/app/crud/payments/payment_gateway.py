"""Payment gateway collaborator.

The real gateway is external; SimulatedPaymentGateway stands in for it and
keeps the same contract: synchronous, idempotent on retry with the same key
and amount. A retry after the caller's transaction rolled back gets the
original transaction back.
"""
import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from ...enum.payment_enum import PaymentMethod

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    transaction_id: str
    message: str = ""
    amount: Decimal = Decimal("0")


class PaymentGateway(Protocol):
    def charge(self, amount: Decimal, method: PaymentMethod, idempotency_key: str) -> PaymentResult:
        ...


class SimulatedPaymentGateway:

    def __init__(self, max_remembered: int = 10000):
        self._results: "OrderedDict[str, PaymentResult]" = OrderedDict()
        self._max_remembered = max_remembered
        self._lock = threading.Lock()

    def charge(self, amount: Decimal, method: PaymentMethod, idempotency_key: str) -> PaymentResult:
        amount = Decimal(str(amount))
        with self._lock:
            previous = self._results.get(idempotency_key)
            if previous is not None:
                if previous.amount != amount:
                    logger.warning("Key %s reused for %s, originally charged %s",
                                   idempotency_key, amount, previous.amount)
                    return PaymentResult(False, "", "Idempotency key was already used for a different amount", amount)
                logger.info("Replaying payment result for %s", idempotency_key)
                self._results.move_to_end(idempotency_key)
                return previous

            result = self._process(amount, PaymentMethod(method))
            # failed attempts may be retried under the same key
            if result.success:
                self._remember(idempotency_key, result)

        logger.info("Payment %s via %s for %s: %s", result.transaction_id,
                    method.value, amount, "success" if result.success else result.message)
        return result

    def _remember(self, key: str, result: PaymentResult):
        self._results[key] = result
        while len(self._results) > self._max_remembered:
            self._results.popitem(last=False)

    def _process(self, amount: Decimal, method: PaymentMethod) -> PaymentResult:
        if amount < 0:
            return PaymentResult(False, "", "Payment amount cannot be negative", amount)
        if method == PaymentMethod.free and amount > 0:
            return PaymentResult(False, "", "Free payment is only available when nothing is due", amount)

        prefix = "CASH_" if method == PaymentMethod.cash else "TXN"
        return PaymentResult(True, prefix + uuid.uuid4().hex[:12].upper(), amount=amount)


payment_gateway = SimulatedPaymentGateway()


def get_payment_gateway() -> PaymentGateway:
    return payment_gateway

from decimal import Decimal

from parking_service.app.crud.payments.payment_gateway import SimulatedPaymentGateway
from parking_service.app.enum.payment_enum import PaymentMethod


def test_retry_with_same_key_replays_the_charge():
    gateway = SimulatedPaymentGateway()
    first = gateway.charge(Decimal("100.00"), PaymentMethod.upi, "b1:booking:0")
    again = gateway.charge(Decimal("100"), PaymentMethod.upi, "b1:booking:0")

    assert first.success
    assert again.transaction_id == first.transaction_id
    assert again.amount == Decimal("100.00")


def test_same_key_with_a_different_amount_is_refused():
    gateway = SimulatedPaymentGateway()
    first = gateway.charge(Decimal("100.00"), PaymentMethod.upi, "b1:booking:0")
    other = gateway.charge(Decimal("150.00"), PaymentMethod.upi, "b1:booking:0")

    assert first.success
    assert not other.success
    assert other.transaction_id == ""
    assert "different amount" in other.message


def test_failed_charge_can_be_retried():
    gateway = SimulatedPaymentGateway()
    failed = gateway.charge(Decimal("40.00"), PaymentMethod.free, "b2:penalty")
    retried = gateway.charge(Decimal("40.00"), PaymentMethod.cash, "b2:penalty")

    assert not failed.success
    assert retried.success
    assert retried.transaction_id.startswith("CASH_")


def test_remembered_results_are_bounded():
    gateway = SimulatedPaymentGateway(max_remembered=2)
    oldest = gateway.charge(Decimal("10"), PaymentMethod.card, "k1")
    gateway.charge(Decimal("10"), PaymentMethod.card, "k2")
    gateway.charge(Decimal("10"), PaymentMethod.card, "k3")

    assert len(gateway._results) == 2
    assert "k1" not in gateway._results
    assert gateway.charge(Decimal("10"), PaymentMethod.card, "k1").transaction_id != oldest.transaction_id

import asyncio

import pytest

from travel_desk.core.errors import PaymentError
from travel_desk.services.payments import (
    IntentStatus,
    PaymentService,
    RazorpayGateway,
    ResultStatus,
    StripeGateway,
    random_decision,
)

from conftest import always_approve, always_decline


def make_service(decide=always_approve):
    return PaymentService(decide=decide, init_delay=0, process_delay=0)


def test_gateways_registered_by_name():
    service = make_service()

    assert service.get_available_gateways() == ["razorpay", "stripe"]
    assert isinstance(service.get_gateway(), RazorpayGateway)
    with pytest.raises(PaymentError, match="Payment gateway paypal not found"):
        service.get_gateway("paypal")


def test_intent_requires_initialized_gateway():
    service = make_service()

    with pytest.raises(PaymentError, match="Razorpay not initialized"):
        asyncio.run(service.create_payment(1000))


def test_razorpay_success_produces_receipt():
    service = make_service()

    async def pay():
        await service.initialize_gateway("razorpay")
        intent = await service.create_payment(
            1499.5, "inr", {"customer_name": "Meera", "trip_title": "Hampi", "travelers": 2}
        )
        return intent, await service.process_payment(intent)

    intent, result = asyncio.run(pay())

    assert intent.amount == 149950
    assert intent.currency == "INR"
    assert intent.status == IntentStatus.succeeded
    assert result.success
    assert result.status == ResultStatus.succeeded
    assert result.receipt.amount == 1499.5
    assert result.receipt.trip_title == "Hampi"
    assert result.receipt.payment_method == "Razorpay"


def test_stripe_decline():
    service = make_service(always_decline)

    async def pay():
        await service.initialize_gateway("stripe")
        intent = await service.create_payment(500, "INR", gateway_name="stripe")
        return intent, await service.process_payment(intent, gateway_name="stripe")

    intent, result = asyncio.run(pay())

    assert intent.currency == "inr"
    assert intent.client_secret.startswith(f"{intent.id}_secret_")
    assert intent.status == IntentStatus.failed
    assert not result.success
    assert result.error == "Your card was declined"
    assert result.receipt is None


def test_decision_receives_success_rate():
    rates = []

    def decide(rate):
        rates.append(rate)
        return True

    gateways = {"stripe": StripeGateway(decide, 0, 0), "razorpay": RazorpayGateway(decide, 0, 0)}
    service = PaymentService(gateways=gateways)

    async def pay(name):
        await service.initialize_gateway(name)
        intent = await service.create_payment(10, gateway_name=name)
        await service.process_payment(intent, gateway_name=name)

    asyncio.run(pay("razorpay"))
    asyncio.run(pay("stripe"))

    assert rates == [0.90, 0.95]


def test_seeded_decision_is_repeatable():
    first, second = random_decision(7), random_decision(7)

    assert [first(0.5) for _ in range(20)] == [second(0.5) for _ in range(20)]

"""
Simulated payment gateways.

Nothing here talks to a payment network: initialization and processing sleep
for a configured delay, and the outcome comes from a decision function that
receives the gateway's success rate. The default decision is a random draw;
tests pass a fixed one.
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol
from uuid import uuid4

from travel_desk.core.clock import utcnow
from travel_desk.core.errors import PaymentError

logger = logging.getLogger(__name__)

Decision = Callable[[float], bool]


class IntentStatus(str, Enum):
    created = "created"
    processing = "processing"
    succeeded = "succeeded"
    failed = "failed"


class ResultStatus(str, Enum):
    succeeded = "succeeded"
    failed = "failed"
    pending = "pending"


@dataclass
class PaymentIntent:
    id: str
    amount: int  # minor currency units
    currency: str
    status: IntentStatus
    metadata: Dict[str, Any] = field(default_factory=dict)
    client_secret: Optional[str] = None


@dataclass
class PaymentReceipt:
    id: str
    payment_id: str
    amount: float
    currency: str
    date: str
    customer_name: Optional[str]
    customer_email: Optional[str]
    trip_title: Optional[str]
    travelers: Optional[int]
    payment_method: str


@dataclass
class PaymentResult:
    success: bool
    payment_id: str
    status: ResultStatus
    error: Optional[str] = None
    receipt: Optional[PaymentReceipt] = None


class PaymentGateway(Protocol):
    name: str
    is_initialized: bool

    async def initialize(self) -> None:
        ...

    async def create_payment_intent(
        self, amount: float, currency: str, metadata: Dict[str, Any]
    ) -> PaymentIntent:
        ...

    async def process_payment(self, intent: PaymentIntent, method: Any) -> PaymentResult:
        ...


def random_decision(seed: Optional[int] = None) -> Decision:
    rng = random.Random(seed)

    def decide(success_rate: float) -> bool:
        return rng.random() < success_rate

    return decide


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


class MockGateway:
    name = "Mock"
    intent_prefix = "mock"
    success_rate = 1.0
    decline_message = "Payment declined"

    def __init__(
        self,
        decide: Optional[Decision] = None,
        init_delay: float = 1.0,
        process_delay: float = 2.0,
    ) -> None:
        self.decide = decide or random_decision()
        self.init_delay = init_delay
        self.process_delay = process_delay
        self.is_initialized = False

    async def initialize(self) -> None:
        logger.info("Initializing %s...", self.name)
        await asyncio.sleep(self.init_delay)
        self.is_initialized = True
        logger.info("%s initialized", self.name)

    def _new_id(self) -> str:
        return f"{self.intent_prefix}_{int(time.time() * 1000)}_{uuid4().hex[:9]}"

    def _currency(self, currency: str) -> str:
        return currency.upper()

    def _client_secret(self, intent_id: str) -> Optional[str]:
        return None

    async def create_payment_intent(
        self, amount: float, currency: str, metadata: Dict[str, Any]
    ) -> PaymentIntent:
        if not self.is_initialized:
            raise PaymentError(f"{self.name} not initialized")
        intent_id = self._new_id()
        intent = PaymentIntent(
            id=intent_id,
            amount=to_minor_units(amount),
            currency=self._currency(currency),
            status=IntentStatus.created,
            metadata=dict(metadata),
            client_secret=self._client_secret(intent_id),
        )
        logger.info("Created %s payment intent %s", self.name, intent.id)
        return intent

    async def process_payment(self, intent: PaymentIntent, method: Any) -> PaymentResult:
        logger.info("Processing %s payment %s", self.name, intent.id)
        await asyncio.sleep(self.process_delay)

        if not self.decide(self.success_rate):
            intent.status = IntentStatus.failed
            return PaymentResult(
                success=False,
                payment_id=intent.id,
                status=ResultStatus.failed,
                error=self.decline_message,
            )

        intent.status = IntentStatus.succeeded
        metadata = intent.metadata
        receipt = PaymentReceipt(
            id=f"rcpt_{uuid4().hex}",
            payment_id=intent.id,
            amount=intent.amount / 100,
            currency=intent.currency,
            date=utcnow().isoformat(),
            customer_name=metadata.get("customer_name"),
            customer_email=metadata.get("customer_email"),
            trip_title=metadata.get("trip_title"),
            travelers=metadata.get("travelers"),
            payment_method=self.name,
        )
        return PaymentResult(
            success=True,
            payment_id=intent.id,
            status=ResultStatus.succeeded,
            receipt=receipt,
        )


class RazorpayGateway(MockGateway):
    name = "Razorpay"
    intent_prefix = "rzp"
    success_rate = 0.90
    decline_message = "Payment declined by bank"


class StripeGateway(MockGateway):
    name = "Stripe"
    intent_prefix = "pi"
    success_rate = 0.95
    decline_message = "Your card was declined"

    def _currency(self, currency: str) -> str:
        return currency.lower()

    def _client_secret(self, intent_id: str) -> Optional[str]:
        return f"{intent_id}_secret_{uuid4().hex[:9]}"


class PaymentService:
    """Registry of gateways addressed by lower-case name."""

    def __init__(
        self,
        gateways: Optional[Dict[str, PaymentGateway]] = None,
        default_gateway: str = "razorpay",
        decide: Optional[Decision] = None,
        init_delay: float = 1.0,
        process_delay: float = 2.0,
    ) -> None:
        if gateways is None:
            decide = decide or random_decision()
            gateways = {
                "razorpay": RazorpayGateway(decide, init_delay, process_delay),
                "stripe": StripeGateway(decide, init_delay, process_delay),
            }
        self.gateways = gateways
        self.default_gateway = default_gateway

    def get_gateway(self, name: Optional[str] = None) -> PaymentGateway:
        name = name or self.default_gateway
        gateway = self.gateways.get(name)
        if gateway is None:
            raise PaymentError(f"Payment gateway {name} not found")
        return gateway

    async def initialize_gateway(self, name: str) -> None:
        await self.get_gateway(name).initialize()

    async def create_payment(
        self,
        amount: float,
        currency: str = "INR",
        metadata: Optional[Dict[str, Any]] = None,
        gateway_name: Optional[str] = None,
    ) -> PaymentIntent:
        gateway = self.get_gateway(gateway_name)
        return await gateway.create_payment_intent(amount, currency, metadata or {})

    async def process_payment(
        self, intent: PaymentIntent, method: Any = None, gateway_name: Optional[str] = None
    ) -> PaymentResult:
        return await self.get_gateway(gateway_name).process_payment(intent, method)

    def get_available_gateways(self) -> List[str]:
        return list(self.gateways)

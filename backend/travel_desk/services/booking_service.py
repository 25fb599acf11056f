from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from travel_desk.core.errors import NotFoundError, ValidationError
from travel_desk.models.domain import Booking, Customer, LogLevel, PaymentStatus, Trip
from travel_desk.models.validation import validate_booking
from travel_desk.services.monitor import SystemMonitor
from travel_desk.services.payments import PaymentReceipt, PaymentResult, PaymentService
from travel_desk.storage.repository import DataStore, normalize_payload

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    success: bool
    payment: PaymentResult
    booking: Optional[Booking] = None
    customer: Optional[Customer] = None
    receipt: Optional[PaymentReceipt] = None
    error: Optional[str] = None


class BookingService:
    """
    Booking wizard back end: validate, hold the seats, charge the mock
    gateway, then record.

    Seats are taken before the first ``await`` and given back when the charge
    does not end in a stored booking.
    """

    def __init__(self, store: DataStore, payments: PaymentService, monitor: SystemMonitor):
        self.store = store
        self.payments = payments
        self.monitor = monitor

    def _reserve_seats(self, trip_id: str, travelers: int) -> Trip:
        trip = self.store.get_trip_by_id(trip_id)
        if trip is None:
            raise NotFoundError(f"Trip {trip_id} not found")
        if travelers > trip.available_seats:
            raise ValidationError(
                "Booking", [f"Only {trip.available_seats} seats available on {trip.title}"]
            )
        self.store.update_trip(trip.id, {"available_seats": trip.available_seats - travelers})
        return trip

    def _release_seats(self, trip_id: str, travelers: int) -> None:
        trip = self.store.get_trip_by_id(trip_id)
        if trip is None:
            logger.warning("Trip %s vanished while releasing %d seats", trip_id, travelers)
            return
        self.store.update_trip(trip.id, {"available_seats": trip.available_seats + travelers})

    async def checkout(
        self,
        payload: Mapping[str, Any],
        gateway_name: Optional[str] = None,
        payment_method: Any = None,
    ) -> CheckoutResult:
        data = {k: v for k, v in normalize_payload(Booking, payload).items() if k in Booking.model_fields}
        result = validate_booking(data)
        if not result.valid:
            raise ValidationError("Booking", result.errors)

        gateway_name = gateway_name or self.payments.default_gateway
        gateway = self.payments.get_gateway(gateway_name)
        travelers = data["number_of_travelers"]
        trip = self._reserve_seats(data.get("trip_id") or "", travelers)

        booking = None
        try:
            if not gateway.is_initialized:
                await self.payments.initialize_gateway(gateway_name)
            intent = await self.payments.create_payment(
                data["total_amount"],
                trip.currency,
                {
                    "customer_name": data["customer_name"],
                    "customer_email": data["customer_email"],
                    "trip_title": trip.title,
                    "travelers": travelers,
                },
                gateway_name,
            )
            payment = await self.payments.process_payment(intent, payment_method, gateway_name)
            if payment.success:
                booking = self.store.add_booking(
                    {
                        **data,
                        "payment_status": PaymentStatus.completed,
                        "payment_id": payment.payment_id,
                        "payment_method": gateway_name,
                    }
                )
        finally:
            if booking is None:
                self._release_seats(trip.id, travelers)

        if booking is None:
            self.monitor.log(
                LogLevel.warning,
                "PaymentService",
                f"Payment failed for {data['customer_email']}",
                {"paymentId": payment.payment_id, "error": payment.error, "tripId": trip.id},
            )
            return CheckoutResult(success=False, payment=payment, error=payment.error)

        customer = self._upsert_customer(booking, trip.categories)
        logger.info("Booking %s paid via %s", booking.id, gateway_name)
        return CheckoutResult(
            success=True,
            payment=payment,
            booking=booking,
            customer=customer,
            receipt=payment.receipt,
        )

    def _upsert_customer(self, booking: Booking, preferences: list) -> Customer:
        existing = self.store.get_customer_by_email(booking.customer_email)
        if existing is None:
            return self.store.add_customer(
                {
                    "name": booking.customer_name,
                    "email": booking.customer_email,
                    "phone": booking.customer_phone,
                    "bookings": [booking.id],
                    "total_spent": booking.total_amount,
                    "preferences": list(preferences),
                }
            )
        return self.store.update_customer(
            existing.id,
            {
                "bookings": existing.bookings + [booking.id],
                "total_spent": existing.total_spent + booking.total_amount,
            },
        )

    def update_status(self, booking_id: str, status: PaymentStatus | str) -> Booking:
        booking = self.store.update_booking(booking_id, {"payment_status": PaymentStatus(status)})
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        self.monitor.log(
            LogLevel.info,
            "BookingService",
            f"Booking {booking_id} marked {booking.payment_status.value}",
        )
        return booking

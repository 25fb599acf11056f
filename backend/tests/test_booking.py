import asyncio

import pytest

from travel_desk.core.errors import NotFoundError, ValidationError
from travel_desk.models.domain import LogLevel, PaymentStatus
from travel_desk.services.container import build_services
from travel_desk.storage.backends import InMemoryKeyValueStore

from conftest import always_decline, booking_payload, make_settings, trip_payload


def test_checkout_records_booking_seats_and_customer(services):
    trip = services.store.add_trip(trip_payload(capacity=24, available_seats=12))

    result = asyncio.run(services.bookings.checkout(booking_payload(trip.id)))

    assert result.success
    assert result.payment.payment_id.startswith("rzp_")
    assert result.booking.payment_status == PaymentStatus.completed
    assert result.booking.payment_id == result.payment.payment_id
    assert result.booking.payment_method == "razorpay"
    assert result.receipt.amount == 36000
    assert result.receipt.trip_title == trip.title

    assert services.store.get_trip_by_id(trip.id).available_seats == 10
    customers = services.store.get_customers()
    assert len(customers) == 1
    assert customers[0].total_spent == 36000
    assert customers[0].bookings == [result.booking.id]
    assert customers[0].preferences == ["Heritage", "Karnataka"]


def test_repeat_customer_is_updated_not_duplicated(services):
    trip = services.store.add_trip(trip_payload())

    first = asyncio.run(services.bookings.checkout(booking_payload(trip.id)))
    second = asyncio.run(
        services.bookings.checkout(
            booking_payload(
                trip.id,
                number_of_travelers=1,
                total_amount=18000,
                travelers=[{"name": "Meera Iyer", "age": 34}],
            ),
            gateway_name="stripe",
        )
    )

    assert second.payment.payment_id.startswith("pi_")
    customers = services.store.get_customers()
    assert len(customers) == 1
    assert customers[0].total_spent == 54000
    assert customers[0].bookings == [first.booking.id, second.booking.id]
    assert services.store.get_trip_by_id(trip.id).available_seats == 9


def test_declined_payment_stores_nothing():
    services = build_services(make_settings(), backend=InMemoryKeyValueStore(), decide=always_decline)
    trip = services.store.add_trip(trip_payload())

    result = asyncio.run(services.bookings.checkout(booking_payload(trip.id)))

    assert not result.success
    assert result.error == "Payment declined by bank"
    assert result.booking is None
    assert services.store.get_bookings() == []
    assert services.store.get_customers() == []
    assert services.store.get_trip_by_id(trip.id).available_seats == 12
    assert services.monitor.get_errors(LogLevel.warning)[0].component == "PaymentService"


def test_checkout_requires_enough_seats(services):
    trip = services.store.add_trip(trip_payload(available_seats=1))

    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(services.bookings.checkout(booking_payload(trip.id)))

    assert excinfo.value.errors == [f"Only 1 seats available on {trip.title}"]
    assert services.store.get_bookings() == []


def test_checkout_unknown_trip(services):
    with pytest.raises(NotFoundError):
        asyncio.run(services.bookings.checkout(booking_payload("TRIP_missing")))


def test_checkout_validates_before_charging(services):
    trip = services.store.add_trip(trip_payload())

    with pytest.raises(ValidationError):
        asyncio.run(services.bookings.checkout(booking_payload(trip.id, customer_email="nope")))

    assert not services.payments.get_gateway("razorpay").is_initialized


def test_update_status(services):
    booking = services.store.add_booking(booking_payload("TRIP_001"))

    updated = services.bookings.update_status(booking.id, "refunded")

    assert updated.payment_status == PaymentStatus.refunded
    with pytest.raises(NotFoundError):
        services.bookings.update_status("BOOK_missing", PaymentStatus.failed)


def test_overlapping_checkouts_keep_every_decrement(services):
    trip = services.store.add_trip(trip_payload(capacity=24, available_seats=12))

    async def book_twice():
        return await asyncio.gather(
            services.bookings.checkout(booking_payload(trip.id)),
            services.bookings.checkout(booking_payload(trip.id, customer_email="kabir@example.com")),
        )

    results = asyncio.run(book_twice())

    assert all(r.success for r in results)
    assert len(services.store.get_bookings()) == 2
    assert services.store.get_trip_by_id(trip.id).available_seats == 8


def test_overlapping_checkouts_cannot_oversell(services):
    trip = services.store.add_trip(trip_payload(available_seats=3))

    async def book_twice():
        return await asyncio.gather(
            services.bookings.checkout(booking_payload(trip.id)),
            services.bookings.checkout(booking_payload(trip.id, customer_email="kabir@example.com")),
            return_exceptions=True,
        )

    first, second = asyncio.run(book_twice())

    assert first.success
    assert isinstance(second, ValidationError)
    assert second.errors == [f"Only 1 seats available on {trip.title}"]
    assert len(services.store.get_bookings()) == 1
    assert services.store.get_trip_by_id(trip.id).available_seats == 1

"""Figures for the admin dashboards; derived on demand, never stored."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from travel_desk.core.clock import utcnow
from travel_desk.models.domain import (
    BlogPost,
    Booking,
    Customer,
    CustomerSegment,
    PaymentStatus,
    Trip,
    as_datetime,
)
from travel_desk.services.content import estimate_reading_time

VIP_SPEND = 100_000
REGULAR_SPEND = 25_000
INACTIVE_AFTER = timedelta(days=6 * 30)


def _latest_booking(customer: Customer, bookings_by_id: Dict[str, Booking]) -> Optional[datetime]:
    dates = [bookings_by_id[b].booking_date for b in customer.bookings if b in bookings_by_id]
    return max(dates) if dates else None


def customer_segment(
    customer: Customer, bookings: Iterable[Booking], now: Optional[datetime] = None
) -> CustomerSegment:
    if customer.total_spent > VIP_SPEND:
        return CustomerSegment.vip
    if customer.total_spent > REGULAR_SPEND:
        return CustomerSegment.regular
    if not customer.bookings:
        return CustomerSegment.new
    latest = _latest_booking(customer, {b.id: b for b in bookings})
    # bookings that no longer exist count as long past
    if latest is None or latest < (now or utcnow()) - INACTIVE_AFTER:
        return CustomerSegment.inactive
    return CustomerSegment.regular


def customer_analytics(
    customers: List[Customer], bookings: List[Booking], now: Optional[datetime] = None
) -> dict:
    now = now or utcnow()
    segments = {segment.value: 0 for segment in CustomerSegment}
    for customer in customers:
        segments[customer_segment(customer, bookings, now).value] += 1
    total_spent = sum(c.total_spent for c in customers)
    return {
        "total_customers": len(customers),
        "new_this_month": sum(
            1
            for c in customers
            if c.created_at.year == now.year and c.created_at.month == now.month
        ),
        "repeat_customers": sum(1 for c in customers if len(c.bookings) > 1),
        "avg_spending": total_spent / len(customers) if customers else 0.0,
        "top_spenders": [
            c.id for c in sorted(customers, key=lambda c: c.total_spent, reverse=True)[:5]
        ],
        "segments": segments,
    }


def _trip_start(trip: Trip) -> datetime:
    return as_datetime(trip.start_date)


def _paid(bookings: Iterable[Booking]) -> List[Booking]:
    return [b for b in bookings if b.payment_status == PaymentStatus.completed]


def trip_analytics(trips: List[Trip], bookings: List[Booking], now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    total_capacity = sum(t.capacity for t in trips)
    total_booked = sum(t.capacity - t.available_seats for t in trips)

    performance = []
    for trip in trips:
        trip_bookings = [b for b in bookings if b.trip_id == trip.id]
        performance.append(
            {
                "trip_id": trip.id,
                "title": trip.title,
                "booking_count": len(trip_bookings),
                "revenue": sum(b.total_amount for b in _paid(trip_bookings)),
            }
        )
    performance.sort(key=lambda row: row["revenue"], reverse=True)

    return {
        "total_trips": len(trips),
        "active_trips": sum(1 for t in trips if _trip_start(t) > now),
        "completed_trips": sum(1 for t in trips if as_datetime(t.end_date) < now),
        "total_revenue": sum(b.total_amount for b in _paid(bookings)),
        "avg_occupancy": (total_booked / total_capacity) * 100 if total_capacity else 0.0,
        "top_performing_trips": performance[:5],
    }


def blog_analytics(blogs: List[BlogPost]) -> dict:
    published = [b for b in blogs if b.published]
    reading_times = [estimate_reading_time(b.content) for b in blogs]
    return {
        "total_posts": len(blogs),
        "published_posts": len(published),
        "draft_posts": len(blogs) - len(published),
        "avg_reading_time": round(sum(reading_times) / len(reading_times)) if reading_times else 0,
    }


def dashboard_summary(store, now: Optional[datetime] = None) -> dict:
    trips = store.get_trips()
    bookings = store.get_bookings()
    customers = store.get_customers()
    return {
        "trips": trip_analytics(trips, bookings, now),
        "customers": customer_analytics(customers, bookings, now),
        "blogs": blog_analytics(store.get_blogs()),
        "testimonials": len(store.get_testimonials()),
    }

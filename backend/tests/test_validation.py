from datetime import datetime, timedelta, timezone

from travel_desk.models.validation import validate_blog_post, validate_booking, validate_trip

from conftest import blog_payload, booking_payload, trip_payload


def test_valid_trip_passes():
    result = validate_trip(trip_payload())

    assert result.valid
    assert result.errors == []


def test_trip_reports_every_violation():
    result = validate_trip(
        {
            "title": "Go",
            "location": "",
            "start_date": "2030-05-10",
            "end_date": "2030-05-01",
            "price": 0,
            "capacity": -1,
            "available_seats": 3,
        }
    )

    assert not result.valid
    assert result.errors == [
        "Trip title must be at least 3 characters long",
        "Trip location must be at least 3 characters long",
        "End date must be after start date",
        "Trip price must be a positive number",
        "Trip capacity must be a positive number",
        "Available seats must be between 0 and total capacity",
    ]


def test_trip_start_in_past_rejected():
    now = datetime(2030, 1, 1, 12, tzinfo=timezone.utc)
    result = validate_trip(trip_payload(start_date="2029-12-01", end_date="2029-12-05"), now=now)

    assert result.errors == ["Start date cannot be in the past"]


def test_trip_starting_today_counts_as_past():
    now = datetime(2030, 1, 1, 9, tzinfo=timezone.utc)
    result = validate_trip(trip_payload(start_date="2030-01-01", end_date="2030-01-04"), now=now)

    assert "Start date cannot be in the past" in result.errors


def test_trip_missing_dates():
    result = validate_trip(trip_payload(start_date=None, end_date="not a date"))

    assert result.errors == ["Trip must have valid start and end dates"]


def test_seats_above_capacity_rejected():
    result = validate_trip(trip_payload(capacity=10, available_seats=11))

    assert result.errors == ["Available seats must be between 0 and total capacity"]


def test_booking_rules():
    payload = booking_payload(
        "TRIP_1",
        customer_name="A",
        customer_email="not-an-email",
        customer_phone="12345",
        number_of_travelers=0,
        total_amount=-5,
        travelers=[{"name": "", "age": 130}],
    )

    result = validate_booking(payload)

    assert result.errors == [
        "Customer name must be at least 2 characters long",
        "Valid customer email is required",
        "Valid customer phone number is required",
        "Number of travelers must be a positive number",
        "Total amount must be a positive number",
        "Traveler 1 name is required",
        "Traveler 1 age must be between 1 and 120",
    ]


def test_booking_unknown_payment_status():
    result = validate_booking(booking_payload("TRIP_1", payment_status="paid"))

    assert result.errors == ["Payment status must be one of pending, completed, failed, refunded"]


def test_valid_booking_passes():
    assert validate_booking(booking_payload("TRIP_1", payment_status="completed")).valid


def test_blog_rules():
    result = validate_blog_post(
        blog_payload(title="Tiny", slug="ab", excerpt="short", content="too short", author="", tags=["x"])
    )

    assert result.errors == [
        "Blog title must be at least 5 characters long",
        "Blog slug must be at least 3 characters long",
        "Blog excerpt must be at least 20 characters long",
        "Blog content must be at least 100 characters long",
        "Blog author is required",
        "Tag 1 must be at least 2 characters long",
    ]


def test_blog_needs_a_tag_when_tags_given():
    result = validate_blog_post(blog_payload(tags=[]))

    assert result.errors == ["At least one tag is required"]


def test_future_trip_boundary_uses_now():
    now = datetime.now(timezone.utc)
    start = (now + timedelta(days=1)).date()
    assert validate_trip(trip_payload(start_date=start, end_date=start + timedelta(days=1)), now=now).valid

import json

import pytest

from travel_desk.core.errors import DuplicateError, PersistenceError, ValidationError
from travel_desk.models.domain import LogLevel, PaymentStatus
from travel_desk.services.monitor import PerformanceMonitor, SystemMonitor
from travel_desk.storage.backends import FileKeyValueStore, InMemoryKeyValueStore
from travel_desk.storage.repository import DataStore

from conftest import blog_payload, booking_payload, trip_payload

def make_store(backend):
    monitor = SystemMonitor(backend, memory_gauge=lambda: 0.0)
    return DataStore(backend, monitor, PerformanceMonitor(monitor))

def test_empty_store_returns_defaults(store):
    assert store.get_trips() == []
    assert store.get_bookings() == []
    assert store.get_settings().site_name == "TravelBabaVoyage"

def test_add_trip_persists_camel_case_document(store, backend):
    trip = store.add_trip(trip_payload())

    assert trip.id.startswith("TRIP_")
    assert trip.created_at == trip.updated_at
    document = json.loads(backend.get_item("travelbaba_data"))
    stored = document["trips"][0]
    assert stored["availableSeats"] == 12
    assert stored["startDate"] == trip.start_date.isoformat()
    assert store.get_trip_by_id(trip.id) == trip

def test_add_trip_rejects_reversed_dates(store, services):
    payload = trip_payload()
    payload["start_date"], payload["end_date"] = payload["end_date"], payload["start_date"]

    with pytest.raises(ValidationError) as excinfo:
        store.add_trip(payload)

    assert "End date must be after start date" in excinfo.value.errors
    assert store.get_trips() == []
    assert services.monitor.get_errors(LogLevel.error)

def test_add_trip_rejects_unknown_field(store):
    with pytest.raises(ValidationError) as excinfo:
        store.add_trip(trip_payload(rating=5))

    assert excinfo.value.errors == ["Unknown Trip field: rating"]

def test_update_trip_merges_and_touches_updated_at(store):
    trip = store.add_trip(trip_payload())

    updated = store.update_trip(trip.id, {"availableSeats": 5, "featured": True})

    assert updated.available_seats == 5
    assert updated.featured
    assert updated.title == trip.title
    assert updated.updated_at >= trip.updated_at
    assert store.get_trip_by_id(trip.id).available_seats == 5

def test_update_cannot_change_id(store):
    trip = store.add_trip(trip_payload())

    with pytest.raises(ValidationError):
        store.update_trip(trip.id, {"id": "TRIP_other"})

def test_update_and_delete_missing_records(store):
    assert store.update_trip("TRIP_missing", {"title": "Nope"}) is None
    assert store.delete_trip("TRIP_missing") is False

def test_delete_trip(store):
    trip = store.add_trip(trip_payload())

    assert store.delete_trip(trip.id)
    assert store.get_trip_by_id(trip.id) is None

def test_add_booking_defaults(store):
    booking = store.add_booking(booking_payload("TRIP_001"))

    assert booking.id.startswith("BOOK_")
    assert booking.payment_status == PaymentStatus.pending
    assert booking.booking_date is not None
    assert booking.travelers[1].name == "Kabir Iyer"

def test_add_booking_rejects_bad_email(store):
    with pytest.raises(ValidationError) as excinfo:
        store.add_booking(booking_payload("TRIP_001", customer_email="meera@"))

    assert excinfo.value.errors == ["Valid customer email is required"]
    assert store.get_bookings() == []

def test_blog_slug_must_be_unique(store, services):
    first = store.add_blog(blog_payload())

    with pytest.raises(DuplicateError) as excinfo:
        store.add_blog(blog_payload(title="Another Monsoon Post"))

    assert str(excinfo.value) == 'Blog with slug "monsoon-treks-near-pune" already exists'
    assert [b.id for b in store.get_blogs()] == [first.id]
    assert services.monitor.get_errors(LogLevel.error)[0].message == str(excinfo.value)

def test_blog_defaults_and_reading_time(store, backend):
    blog = store.add_blog(blog_payload(content="word " * 450))

    assert blog.reading_time == 3
    assert blog.publish_date is not None
    assert json.loads(backend.get_item("travelbaba_data"))["blogs"][0]["date"] == blog.publish_date.isoformat()
    assert store.get_blog_by_slug("monsoon-treks-near-pune").id == blog.id

    updated = store.update_blog(blog.id, {"content": "word " * 150})
    assert updated.reading_time == 1

def test_customer_lookup_is_exact(store):
    store.add_customer({"name": "Meera", "email": "meera@example.com", "phone": "9876543210"})

    assert store.get_customer_by_email("meera@example.com") is not None
    assert store.get_customer_by_email("Meera@Example.com") is None

def test_testimonial_crud(store):
    testimonial = store.add_testimonial({"name": "Ravi", "role": "Guest", "rating": 4, "text": "Lovely"})

    assert store.update_testimonial(testimonial.id, {"featured": True}).featured
    assert store.delete_testimonial(testimonial.id)
    assert store.get_testimonials() == []

def fill_store(store):
    trip = store.add_trip(trip_payload())
    booking = store.add_booking(booking_payload(trip.id, payment_status="completed"))
    store.add_customer(
        {
            "name": booking.customer_name,
            "email": booking.customer_email,
            "phone": booking.customer_phone,
            "bookings": [booking.id],
            "total_spent": booking.total_amount,
        }
    )
    store.add_blog(blog_payload())

def snapshot(store):
    return store.get_trips(), store.get_bookings(), store.get_customers(), store.get_blogs()

def test_export_then_import_restores_and_backs_up(store, backend):
    fill_store(store)
    before = snapshot(store)
    exported = json.loads(store.export_data())
    assert exported["version"] == "1.0"
    assert "exportedAt" in exported

    store.add_trip(trip_payload(title="Second Trip"))
    store.delete_customer(before[2][0].id)
    store.update_blog(before[3][0].id, {"published": False})

    assert store.import_data(json.dumps(exported))

    assert snapshot(store) == before
    backups = store.list_backups()
    assert len(backups) == 1
    assert len(json.loads(backend.get_item(backups[0]))["trips"]) == 2
    assert "version" not in json.loads(backend.get_item("travelbaba_data"))

def test_import_rejects_malformed_payload(store, backend):
    store.add_trip(trip_payload())
    stored = backend.get_item("travelbaba_data")

    assert store.import_data("{not json") is False
    assert store.import_data(json.dumps({"trips": []})) is False
    assert store.import_data(json.dumps(["trips"])) is False
    assert (
        store.import_data(
            json.dumps({"trips": "not-an-array", "bookings": [], "customers": [], "blogs": []})
        )
        is False
    )

    assert backend.get_item("travelbaba_data") == stored
    assert store.list_backups() == []

def test_records_with_wrong_types_are_skipped(store, services):
    good = store.add_trip(trip_payload())
    document = json.loads(store.export_data())
    broken = dict(document["trips"][0], id="TRIP_broken", price="abc", capacity="ten")
    document["trips"].append(broken)

    assert store.import_data(json.dumps(document))

    assert [t.id for t in store.get_trips()] == [good.id]
    warning = services.monitor.get_errors(LogLevel.warning)[0]
    assert warning.message == "Skipping unreadable trips record"
    assert warning.context["id"] == "TRIP_broken"

def test_add_trip_defaults_seats_to_capacity(store):
    payload = trip_payload(capacity=16)
    del payload["available_seats"]

    assert store.add_trip(payload).available_seats == 16

def test_unknown_field_is_logged(store, services):
    with pytest.raises(ValidationError):
        store.add_trip(trip_payload(rating=5))

    entry = services.monitor.get_errors(LogLevel.error)[0]
    assert entry.message == "Trip validation failed: Unknown Trip field: rating"
    assert entry.component == "DataStore"

def test_quota_exceeded_raises_persistence_error():
    store = make_store(InMemoryKeyValueStore(quota_bytes=200))

    with pytest.raises(PersistenceError):
        store.add_trip(trip_payload())

    assert store.get_trips() == []

def test_corrupt_document_falls_back_to_defaults():
    backend = InMemoryKeyValueStore()
    backend.set_item("travelbaba_data", "{broken")
    store = make_store(backend)

    assert store.get_trips() == []
    assert store.monitor.get_errors(LogLevel.error)[0].message == "Error loading stored data, using defaults"

def test_seed_only_fills_an_empty_store(store):
    assert store.seed_sample_data()
    assert not store.seed_sample_data()

    trips = store.get_trips()
    assert [t.id for t in trips] == ["TRIP_001"]
    assert trips[0].available_seats == 12
    assert store.get_blog_by_slug("diwali-in-maharashtra-traditions").published

def test_file_backend_round_trip(tmp_path):
    store = make_store(FileKeyValueStore(tmp_path / "data"))
    trip = store.add_trip(trip_payload())

    reopened = make_store(FileKeyValueStore(tmp_path / "data"))

    assert reopened.get_trip_by_id(trip.id).title == trip.title
    assert (tmp_path / "data" / "travelbaba_data.json").is_file()

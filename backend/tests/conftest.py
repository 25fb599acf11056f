from datetime import timedelta

import pytest

from travel_desk.core.clock import utcnow
from travel_desk.core.config import Settings
from travel_desk.services.container import build_services
from travel_desk.storage.backends import InMemoryKeyValueStore


def always_approve(success_rate: float) -> bool:
    return True


def always_decline(success_rate: float) -> bool:
    return False


def make_settings(**overrides) -> Settings:
    values = dict(
        seed_sample_data=False,
        storage_backend="memory",
        health_check_interval_seconds=0,
        payment_init_delay_seconds=0,
        payment_process_delay_seconds=0,
        memory_warning_mb=1_000_000.0,
    )
    values.update(overrides)
    return Settings(**values)


def trip_payload(**overrides) -> dict:
    start = (utcnow() + timedelta(days=30)).date()
    payload = {
        "title": "Hampi Heritage Walk",
        "location": "Hampi, Karnataka",
        "start_date": start,
        "end_date": start + timedelta(days=4),
        "price": 18000,
        "capacity": 24,
        "available_seats": 12,
        "categories": ["Heritage", "Karnataka"],
    }
    payload.update(overrides)
    return payload


def booking_payload(trip_id: str, **overrides) -> dict:
    payload = {
        "trip_id": trip_id,
        "customer_name": "Meera Iyer",
        "customer_email": "meera@example.com",
        "customer_phone": "9876543210",
        "number_of_travelers": 2,
        "total_amount": 36000,
        "travelers": [
            {"name": "Meera Iyer", "age": 34},
            {"name": "Kabir Iyer", "age": 36},
        ],
    }
    payload.update(overrides)
    return payload


def blog_payload(**overrides) -> dict:
    payload = {
        "title": "Monsoon Treks Near Pune",
        "slug": "monsoon-treks-near-pune",
        "excerpt": "Waterfalls, forts and misty ridges within a day of the city.",
        "author": "Team TravelBabaVoyage",
        "content": "The Sahyadri come alive in July. " * 10,
        "tags": ["Trekking", "Monsoon"],
        "published": True,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def backend():
    return InMemoryKeyValueStore()


@pytest.fixture
def services(backend):
    return build_services(make_settings(), backend=backend, decide=always_approve)


@pytest.fixture
def store(services):
    return services.store

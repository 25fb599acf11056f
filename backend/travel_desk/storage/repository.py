"""
The data store: every collection lives in one JSON root document under a
single key of the key-value backend. Each mutation reads the whole document,
changes it and writes it back, so concurrent writers overwrite each other
(last write wins). One writer at a time is assumed.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar
from uuid import uuid4

import pydantic

from travel_desk.core.clock import utcnow
from travel_desk.core.errors import DataImportError, DuplicateError, PersistenceError, ValidationError
from travel_desk.models.domain import (
    BlogPost,
    Booking,
    Customer,
    LogLevel,
    PaymentStatus,
    Record,
    SiteSettings,
    Testimonial,
    Trip,
)
from travel_desk.models.validation import (
    ValidationResult,
    validate_blog_post,
    validate_booking,
    validate_trip,
)
from travel_desk.services.content import estimate_reading_time
from travel_desk.services.monitor import PerformanceMonitor, SystemMonitor
from travel_desk.storage import seed
from travel_desk.storage.backends import KeyValueBackend

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

COLLECTIONS = ("trips", "testimonials", "blogs", "bookings", "customers")
REQUIRED_IMPORT_COLLECTIONS = ("trips", "bookings", "customers", "blogs")
EXPORT_VERSION = "1.0"
EXPORT_STAMPS = ("exportedAt", "version")
IMMUTABLE_FIELDS = ("id", "created_at")


def field_errors(exc: pydantic.ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or 'record'}: {error['msg']}"
        for error in exc.errors()
    ]


def normalize_payload(cls: Type[Record], payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Key ``payload`` by field name; unknown keys are kept as given."""
    keys = cls.accepted_keys()
    return {keys.get(key, key): value for key, value in payload.items()}


class DataStore:
    def __init__(
        self,
        backend: KeyValueBackend,
        monitor: SystemMonitor,
        timer: PerformanceMonitor,
        storage_key: str = "travelbaba_data",
        clock: Callable = utcnow,
    ) -> None:
        self.backend = backend
        self.monitor = monitor
        self.timer = timer
        self.storage_key = storage_key
        self.clock = clock

    # -- document ---------------------------------------------------------

    def default_document(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {name: [] for name in COLLECTIONS}
        document["settings"] = seed.DEFAULT_SETTINGS.to_document()
        return document

    def _load(self) -> Dict[str, Any]:
        stored = self.backend.get_item(self.storage_key)
        document = self.default_document()
        if not stored:
            return document
        try:
            parsed = json.loads(stored)
            if not isinstance(parsed, dict):
                raise ValueError("root document is not an object")
        except ValueError as exc:
            self.monitor.log(
                LogLevel.error,
                "DataStore",
                "Error loading stored data, using defaults",
                {"error": str(exc)},
            )
            return document
        document.update(parsed)
        for name in COLLECTIONS:
            if not isinstance(document[name], list):
                document[name] = []
        return document

    def _save(self, document: Dict[str, Any]) -> None:
        try:
            self.backend.set_item(self.storage_key, json.dumps(document))
        except PersistenceError as exc:
            self.monitor.log(
                LogLevel.error,
                "DataStore",
                "Error saving data",
                {"error": str(exc)},
            )
            raise

    def _records(self, collection: str, cls: Type[R]) -> List[R]:
        records: List[R] = []
        for raw in self._load()[collection]:
            try:
                records.append(cls.model_validate(raw))
            except pydantic.ValidationError as exc:
                self.monitor.log(
                    LogLevel.warning,
                    "DataStore",
                    f"Skipping unreadable {collection} record",
                    {"id": raw.get("id") if isinstance(raw, dict) else None, "errors": field_errors(exc)},
                )
        return records

    # -- generic helpers --------------------------------------------------

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}_{uuid4().hex}"

    @staticmethod
    def _unknown_fields(cls: Type[Record], data: Mapping[str, Any]) -> List[str]:
        unknown = sorted(set(data) - set(cls.model_fields))
        return [f"Unknown {cls.__name__} field: {name}" for name in unknown]

    def _invalid(self, entity: str, errors: List[str], payload: Mapping[str, Any]) -> ValidationError:
        error = ValidationError(entity, errors)
        self.monitor.log(
            LogLevel.error,
            "DataStore",
            str(error),
            {"payload": dict(payload), "errors": errors},
        )
        return error

    def _reject(self, entity: str, result: ValidationResult, payload: Mapping[str, Any]) -> None:
        if not result.valid:
            raise self._invalid(entity, result.errors, payload)

    def _build(self, cls: Type[R], data: Mapping[str, Any], **stamps: Any) -> R:
        unknown = self._unknown_fields(cls, data)
        if unknown:
            raise self._invalid(cls.__name__, unknown, data)
        try:
            return cls.model_validate({**data, **stamps})
        except pydantic.ValidationError as exc:
            raise self._invalid(cls.__name__, field_errors(exc), data) from exc

    def _insert(self, collection: str, record: R) -> R:
        document = self._load()
        document[collection].append(record.to_document())
        self._save(document)
        return record

    def _find(self, collection: str, cls: Type[R], record_id: str) -> Optional[R]:
        return next((r for r in self._records(collection, cls) if r.id == record_id), None)

    def _update(
        self, collection: str, cls: Type[R], record_id: str, fields: Mapping[str, Any]
    ) -> Optional[R]:
        changes = normalize_payload(cls, fields)
        errors = self._unknown_fields(cls, changes) + [
            f"{cls.__name__} {name} cannot be changed" for name in IMMUTABLE_FIELDS if name in changes
        ]
        if errors:
            raise self._invalid(cls.__name__, errors, changes)

        document = self._load()
        items = document[collection]
        for index, raw in enumerate(items):
            if not isinstance(raw, dict) or raw.get("id") != record_id:
                continue
            try:
                values = {**cls.model_validate(raw).model_dump(), **changes}
                if "updated_at" in cls.model_fields:
                    values["updated_at"] = self.clock()
                record = cls.model_validate(values)
            except pydantic.ValidationError as exc:
                raise self._invalid(cls.__name__, field_errors(exc), changes) from exc
            items[index] = record.to_document()
            self._save(document)
            return record
        return None

    def _delete(self, collection: str, record_id: str) -> bool:
        document = self._load()
        items = document[collection]
        remaining = [r for r in items if not (isinstance(r, dict) and r.get("id") == record_id)]
        if len(remaining) == len(items):
            return False
        document[collection] = remaining
        self._save(document)
        return True

    # -- trips ------------------------------------------------------------

    def get_trips(self) -> List[Trip]:
        return self._records("trips", Trip)

    def get_trip_by_id(self, trip_id: str) -> Optional[Trip]:
        return self._find("trips", Trip, trip_id)

    def add_trip(self, payload: Mapping[str, Any]) -> Trip:
        with self.timer.timed("addTrip"):
            data = normalize_payload(Trip, payload)
            if data.get("available_seats") is None:
                data["available_seats"] = data.get("capacity")
            now = self.clock()
            self._reject("Trip", validate_trip(data, now=now), data)
            trip = self._build(Trip, data, id=self._new_id("TRIP"), created_at=now, updated_at=now)
            self._insert("trips", trip)
            self.monitor.log(LogLevel.info, "DataStore", f"Trip created: {trip.title}", {"tripId": trip.id})
            return trip

    def update_trip(self, trip_id: str, fields: Mapping[str, Any]) -> Optional[Trip]:
        return self._update("trips", Trip, trip_id, fields)

    def delete_trip(self, trip_id: str) -> bool:
        return self._delete("trips", trip_id)

    # -- testimonials -----------------------------------------------------

    def get_testimonials(self) -> List[Testimonial]:
        return self._records("testimonials", Testimonial)

    def add_testimonial(self, payload: Mapping[str, Any]) -> Testimonial:
        data = normalize_payload(Testimonial, payload)
        testimonial = self._build(
            Testimonial, data, id=self._new_id("TEST"), created_at=self.clock()
        )
        return self._insert("testimonials", testimonial)

    def update_testimonial(self, testimonial_id: str, fields: Mapping[str, Any]) -> Optional[Testimonial]:
        return self._update("testimonials", Testimonial, testimonial_id, fields)

    def delete_testimonial(self, testimonial_id: str) -> bool:
        return self._delete("testimonials", testimonial_id)

    # -- blogs ------------------------------------------------------------

    def get_blogs(self) -> List[BlogPost]:
        return self._records("blogs", BlogPost)

    def get_blog_by_slug(self, slug: str) -> Optional[BlogPost]:
        return next((b for b in self.get_blogs() if b.slug == slug), None)

    def add_blog(self, payload: Mapping[str, Any]) -> BlogPost:
        with self.timer.timed("addBlog"):
            data = normalize_payload(BlogPost, payload)
            self._reject("Blog", validate_blog_post(data), data)

            document = self._load()
            existing = next(
                (b for b in document["blogs"] if isinstance(b, dict) and b.get("slug") == data["slug"]),
                None,
            )
            if existing is not None:
                error = DuplicateError(f'Blog with slug "{data["slug"]}" already exists')
                self.monitor.log(
                    LogLevel.error,
                    "DataStore",
                    str(error),
                    {"slug": data["slug"], "existingBlogId": existing.get("id")},
                )
                raise error

            now = self.clock()
            if not data.get("publish_date"):
                data["publish_date"] = now.date()
            data["reading_time"] = estimate_reading_time(data["content"])
            blog = self._build(BlogPost, data, id=self._new_id("BLOG"), created_at=now, updated_at=now)
            document["blogs"].append(blog.to_document())
            self._save(document)
            self.monitor.log(
                LogLevel.info,
                "DataStore",
                f"Blog post created: {blog.title}",
                {"blogId": blog.id, "slug": blog.slug},
            )
            return blog

    def update_blog(self, blog_id: str, fields: Mapping[str, Any]) -> Optional[BlogPost]:
        changes = normalize_payload(BlogPost, fields)
        if isinstance(changes.get("content"), str):
            changes["reading_time"] = estimate_reading_time(changes["content"])
        return self._update("blogs", BlogPost, blog_id, changes)

    def delete_blog(self, blog_id: str) -> bool:
        return self._delete("blogs", blog_id)

    # -- bookings ---------------------------------------------------------

    def get_bookings(self) -> List[Booking]:
        return self._records("bookings", Booking)

    def get_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        return self._find("bookings", Booking, booking_id)

    def add_booking(self, payload: Mapping[str, Any]) -> Booking:
        """The referenced trip is not checked; see BookingService.checkout for that."""
        with self.timer.timed("addBooking"):
            data = normalize_payload(Booking, payload)
            self._reject("Booking", validate_booking(data), data)
            if not data.get("booking_date"):
                data["booking_date"] = self.clock()
            if not data.get("payment_status"):
                data["payment_status"] = PaymentStatus.pending
            booking = self._build(Booking, data, id=self._new_id("BOOK"))
            self._insert("bookings", booking)
            self.monitor.log(
                LogLevel.info,
                "DataStore",
                f"Booking created for {booking.customer_name}",
                {"bookingId": booking.id, "tripId": booking.trip_id},
            )
            return booking

    def update_booking(self, booking_id: str, fields: Mapping[str, Any]) -> Optional[Booking]:
        return self._update("bookings", Booking, booking_id, fields)

    def delete_booking(self, booking_id: str) -> bool:
        return self._delete("bookings", booking_id)

    # -- customers --------------------------------------------------------

    def get_customers(self) -> List[Customer]:
        return self._records("customers", Customer)

    def get_customer_by_email(self, email: str) -> Optional[Customer]:
        # exact match: addresses differing only in case are different customers
        return next((c for c in self.get_customers() if c.email == email), None)

    def add_customer(self, payload: Mapping[str, Any]) -> Customer:
        data = normalize_payload(Customer, payload)
        customer = self._build(Customer, data, id=self._new_id("CUST"), created_at=self.clock())
        return self._insert("customers", customer)

    def update_customer(self, customer_id: str, fields: Mapping[str, Any]) -> Optional[Customer]:
        return self._update("customers", Customer, customer_id, fields)

    def delete_customer(self, customer_id: str) -> bool:
        return self._delete("customers", customer_id)

    # -- settings ---------------------------------------------------------

    def get_settings(self) -> SiteSettings:
        try:
            return SiteSettings.model_validate(self._load()["settings"])
        except pydantic.ValidationError as exc:
            logger.warning("Stored settings unreadable, using defaults: %s", exc)
            return seed.DEFAULT_SETTINGS.model_copy(deep=True)

    # -- export / import --------------------------------------------------

    def _counts(self, document: Mapping[str, Any]) -> Dict[str, int]:
        return {name: len(document[name]) for name in REQUIRED_IMPORT_COLLECTIONS}

    def export_data(self) -> str:
        with self.timer.timed("exportData"):
            document = self._load()
            exported = {
                **document,
                "exportedAt": self.clock().isoformat(),
                "version": EXPORT_VERSION,
            }
            self.monitor.log(LogLevel.info, "DataStore", "Data exported successfully", self._counts(document))
            return json.dumps(exported, indent=2)

    @staticmethod
    def _parse_import(text: str) -> Dict[str, Any]:
        try:
            incoming = json.loads(text)
        except ValueError as exc:
            raise DataImportError(f"Import payload is not valid JSON: {exc}") from exc
        if not isinstance(incoming, dict):
            raise DataImportError("Invalid data structure: expected an object")
        for name in REQUIRED_IMPORT_COLLECTIONS:
            if not isinstance(incoming.get(name), list):
                raise DataImportError(f"Invalid data structure: {name} must be a list")
        if "testimonials" in incoming and not isinstance(incoming["testimonials"], list):
            raise DataImportError("Invalid data structure: testimonials must be a list")
        return {key: value for key, value in incoming.items() if key not in EXPORT_STAMPS}

    def backup_prefix(self) -> str:
        return f"{self.storage_key}_backup_"

    def list_backups(self) -> List[str]:
        prefix = self.backup_prefix()
        return sorted(key for key in self.backend.keys() if key.startswith(prefix))

    def _backup_key(self) -> str:
        base = f"{self.backup_prefix()}{self.clock().strftime('%Y%m%dT%H%M%S%fZ')}"
        key, suffix = base, 1
        while self.backend.get_item(key) is not None:
            key = f"{base}_{suffix}"
            suffix += 1
        return key

    def import_data(self, text: str) -> bool:
        """Replace the whole document; on any failure nothing is changed."""
        with self.timer.timed("importData"):
            try:
                incoming = self._parse_import(text)
                current = self._load()
                backup_key = self._backup_key()
                self.backend.set_item(backup_key, json.dumps(current))
                self._save(incoming)
            except (DataImportError, PersistenceError) as exc:
                self.monitor.log(
                    LogLevel.error,
                    "DataStore",
                    "Failed to import data",
                    {"error": str(exc)},
                )
                return False
            self.monitor.log(
                LogLevel.info,
                "DataStore",
                "Data imported successfully",
                {**self._counts(incoming), "backupKey": backup_key},
            )
            return True

    # -- seed -------------------------------------------------------------

    def seed_sample_data(self) -> bool:
        document = self._load()
        if document["trips"]:
            return False
        now = self.clock()
        document["trips"].append(seed.sample_trip(now))
        document["testimonials"].append(seed.sample_testimonial(now))
        document["blogs"].append(seed.sample_blog(now))
        self._save(document)
        logger.info("Seeded sample trip, testimonial and blog post")
        return True

"""
Payload checks run before Trip, Booking and BlogPost records reach the store.

Every check runs; the result lists all violated rules so a form can show
them at once. Payloads are mappings with snake_case keys.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional

from travel_desk.core.clock import utcnow
from travel_desk.models.domain import PaymentStatus, as_datetime

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


def _result(errors: List[str]) -> ValidationResult:
    return ValidationResult(valid=not errors, errors=errors)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive(value: Any) -> bool:
    return _is_number(value) and value > 0


def _has_text(value: Any, min_length: int) -> bool:
    return isinstance(value, str) and len(value.strip()) >= min_length


def _to_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return as_datetime(value)
    except ValueError:
        return None


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def validate_trip(payload: Mapping[str, Any], now: Optional[datetime] = None) -> ValidationResult:
    """
    ``now`` defaults to the wall clock, so a stored trip re-validated after
    its start date no longer passes.
    """
    errors: List[str] = []

    if not _has_text(payload.get("title"), 3):
        errors.append("Trip title must be at least 3 characters long")
    if not _has_text(payload.get("location"), 3):
        errors.append("Trip location must be at least 3 characters long")

    start = _to_datetime(payload.get("start_date"))
    end = _to_datetime(payload.get("end_date"))
    if start is None or end is None:
        errors.append("Trip must have valid start and end dates")
    else:
        if start >= end:
            errors.append("End date must be after start date")
        if start < (now or utcnow()):
            errors.append("Start date cannot be in the past")

    if not _is_positive(payload.get("price")):
        errors.append("Trip price must be a positive number")

    capacity = payload.get("capacity")
    if not _is_positive(capacity):
        errors.append("Trip capacity must be a positive number")

    seats = payload.get("available_seats")
    if seats is not None:
        if not _is_number(seats) or seats < 0 or (_is_number(capacity) and seats > capacity):
            errors.append("Available seats must be between 0 and total capacity")

    return _result(errors)


def validate_booking(payload: Mapping[str, Any]) -> ValidationResult:
    errors: List[str] = []

    if not _has_text(payload.get("customer_name"), 2):
        errors.append("Customer name must be at least 2 characters long")

    email = payload.get("customer_email")
    if not isinstance(email, str) or not is_valid_email(email):
        errors.append("Valid customer email is required")

    if not _has_text(payload.get("customer_phone"), 10):
        errors.append("Valid customer phone number is required")

    if not _is_positive(payload.get("number_of_travelers")):
        errors.append("Number of travelers must be a positive number")
    if not _is_positive(payload.get("total_amount")):
        errors.append("Total amount must be a positive number")

    status = payload.get("payment_status")
    if status is not None and status not in [s.value for s in PaymentStatus]:
        errors.append("Payment status must be one of pending, completed, failed, refunded")

    travelers = payload.get("travelers")
    if isinstance(travelers, list):
        for index, traveler in enumerate(travelers, start=1):
            traveler = traveler if isinstance(traveler, Mapping) else {}
            if not _has_text(traveler.get("name"), 2):
                errors.append(f"Traveler {index} name is required")
            age = traveler.get("age")
            if not _is_number(age) or age < 1 or age > 120:
                errors.append(f"Traveler {index} age must be between 1 and 120")

    return _result(errors)


def validate_blog_post(payload: Mapping[str, Any]) -> ValidationResult:
    errors: List[str] = []

    if not _has_text(payload.get("title"), 5):
        errors.append("Blog title must be at least 5 characters long")
    if not _has_text(payload.get("slug"), 3):
        errors.append("Blog slug must be at least 3 characters long")
    if not _has_text(payload.get("excerpt"), 20):
        errors.append("Blog excerpt must be at least 20 characters long")
    if not _has_text(payload.get("content"), 100):
        errors.append("Blog content must be at least 100 characters long")
    if not _has_text(payload.get("author"), 2):
        errors.append("Blog author is required")

    tags = payload.get("tags")
    if isinstance(tags, list):
        if not tags:
            errors.append("At least one tag is required")
        for index, tag in enumerate(tags, start=1):
            if not _has_text(tag, 2):
                errors.append(f"Tag {index} must be at least 2 characters long")

    return _result(errors)

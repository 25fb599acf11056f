from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class PaymentStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


class HealthStatus(str, Enum):
    healthy = "healthy"
    warning = "warning"
    critical = "critical"


class LogLevel(str, Enum):
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class CustomerSegment(str, Enum):
    vip = "VIP"
    regular = "Regular"
    new = "New"
    inactive = "Inactive"


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# naive timestamps in stored documents are read as UTC
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

_utc_datetime = TypeAdapter(UtcDatetime)


def as_datetime(value: Any) -> datetime:
    """Aware datetime from a datetime, a date (midnight UTC) or an ISO string."""
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    return _utc_datetime.validate_python(value)


class Record(BaseModel):
    """
    A record of the persisted root document. Stored keys are camelCase
    (``availableSeats``, ``customerEmail``...); Python code uses the field
    names, and both are accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def accepted_keys(cls) -> Dict[str, str]:
        """Map field names and their stored aliases to field names."""
        keys = {}
        for name, info in cls.model_fields.items():
            keys[name] = name
            keys[info.alias or to_camel(name)] = name
        return keys

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ItineraryDay(Record):
    day: int
    title: str
    details: str = ""


class Trip(Record):
    id: str
    title: str
    location: str
    start_date: date
    end_date: date
    price: float
    capacity: int
    available_seats: int
    created_at: UtcDatetime
    updated_at: UtcDatetime
    subtitle: str = ""
    currency: str = "INR"
    cover_image: str = ""
    gallery: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    highlights: List[str] = Field(default_factory=list)
    itinerary: List[ItineraryDay] = Field(default_factory=list)
    map_url: str = ""
    featured: bool = False
    description: Optional[str] = None

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days


class Testimonial(Record):
    id: str
    name: str
    role: str
    rating: int
    text: str
    created_at: UtcDatetime
    photo: str = ""
    trip_id: Optional[str] = None
    featured: bool = False


class BlogPost(Record):
    id: str
    title: str
    slug: str
    excerpt: str
    author: str
    content: str
    created_at: UtcDatetime
    updated_at: UtcDatetime
    # stored under "date"
    publish_date: Optional[date] = Field(default=None, alias="date")
    cover: str = ""
    tags: List[str] = Field(default_factory=list)
    published: bool = False
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: Optional[str] = None
    reading_time: Optional[int] = None
    views: Optional[int] = None


class Traveler(Record):
    name: str
    age: int
    gender: str = ""


class Booking(Record):
    id: str
    trip_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    number_of_travelers: int
    total_amount: float
    booking_date: UtcDatetime
    payment_status: PaymentStatus = PaymentStatus.pending
    travelers: List[Traveler] = Field(default_factory=list)
    special_requests: Optional[str] = None
    payment_id: Optional[str] = None
    payment_method: Optional[str] = None


class Customer(Record):
    id: str
    name: str
    email: str
    phone: str
    created_at: UtcDatetime
    bookings: List[str] = Field(default_factory=list)
    total_spent: float = 0.0
    preferences: List[str] = Field(default_factory=list)


class SiteSettings(Record):
    site_name: str
    contact_email: str
    contact_phone: str
    address: str
    social_media: Dict[str, str] = Field(default_factory=dict)


class LogEntry(Record):
    id: str
    timestamp: UtcDatetime
    level: LogLevel
    component: str
    message: str
    context: Optional[Dict[str, Any]] = None
    stack: Optional[str] = None


class HealthChecks(Record):
    data_store: bool
    local_storage: bool
    payment_service: bool
    memory_usage: float
    error_count: int


class HealthMetrics(Record):
    total_trips: int = 0
    total_bookings: int = 0
    total_customers: int = 0
    total_blogs: int = 0
    data_size: int = 0


class SystemHealth(Record):
    status: HealthStatus
    timestamp: UtcDatetime
    checks: HealthChecks
    metrics: HealthMetrics

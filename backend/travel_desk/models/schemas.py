from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from travel_desk.models.domain import CustomerSegment, HealthStatus, LogLevel, PaymentStatus


class DomainSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, obj: Any):
        return cls.model_validate(obj)


# -- requests ----------------------------------------------------------------
# Rule checks (lengths, ranges, date order) live in models.validation so every
# violation is reported together; these models only fix the shape.


class ItineraryDaySchema(DomainSchema):
    day: int
    title: str
    details: str = ""


class TripCreate(BaseModel):
    title: str = ""
    subtitle: str = ""
    location: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price: Optional[float] = None
    currency: str = "INR"
    capacity: Optional[int] = None
    available_seats: Optional[int] = None
    cover_image: str = ""
    gallery: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    highlights: List[str] = Field(default_factory=list)
    itinerary: List[ItineraryDaySchema] = Field(default_factory=list)
    map_url: str = ""
    featured: bool = False
    description: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump()
        if payload["available_seats"] is None:
            payload["available_seats"] = payload["capacity"]
        return payload


class TripUpdate(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    capacity: Optional[int] = None
    available_seats: Optional[int] = None
    cover_image: Optional[str] = None
    gallery: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    highlights: Optional[List[str]] = None
    itinerary: Optional[List[ItineraryDaySchema]] = None
    map_url: Optional[str] = None
    featured: Optional[bool] = None
    description: Optional[str] = None


class BlogCreate(BaseModel):
    title: str = ""
    slug: Optional[str] = None
    excerpt: str = ""
    cover: str = ""
    author: str = "Team TravelBabaVoyage"
    publish_date: Optional[date] = None
    tags: Optional[List[str]] = None
    content: str = ""
    published: bool = False
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: Optional[str] = None


class BlogUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    cover: Optional[str] = None
    author: Optional[str] = None
    publish_date: Optional[date] = None
    tags: Optional[List[str]] = None
    content: Optional[str] = None
    published: Optional[bool] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: Optional[str] = None


class TestimonialCreate(BaseModel):
    name: str
    role: str = ""
    rating: int = Field(5, ge=1, le=5)
    photo: str = ""
    text: str
    trip_id: Optional[str] = None
    featured: bool = False


class TestimonialUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    photo: Optional[str] = None
    text: Optional[str] = None
    trip_id: Optional[str] = None
    featured: Optional[bool] = None


class TravelerSchema(DomainSchema):
    name: str = ""
    age: Optional[int] = None
    gender: str = ""


class BookingCreate(BaseModel):
    trip_id: str
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    number_of_travelers: Optional[int] = None
    total_amount: Optional[float] = None
    travelers: List[TravelerSchema] = Field(default_factory=list)
    special_requests: Optional[str] = None


class CheckoutRequest(BaseModel):
    booking: BookingCreate
    gateway: Optional[str] = Field(None, description="razorpay|stripe")
    payment_method: Optional[Dict[str, Any]] = None


class BookingStatusUpdate(BaseModel):
    status: PaymentStatus


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    preferences: Optional[List[str]] = None


class LoginRequest(BaseModel):
    username: str
    password: str


# -- responses ---------------------------------------------------------------


class TripSchema(DomainSchema):
    id: str
    title: str
    subtitle: str
    location: str
    start_date: date
    end_date: date
    price: float
    currency: str
    capacity: int
    available_seats: int
    cover_image: str
    gallery: List[str]
    categories: List[str]
    highlights: List[str]
    itinerary: List[ItineraryDaySchema]
    map_url: str
    featured: bool
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BlogPostSchema(DomainSchema):
    id: str
    title: str
    slug: str
    excerpt: str
    cover: str
    author: str
    publish_date: Optional[date] = None
    tags: List[str]
    content: str
    published: bool
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: Optional[str] = None
    reading_time: Optional[int] = None
    views: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class TestimonialSchema(DomainSchema):
    id: str
    name: str
    role: str
    rating: int
    photo: str
    text: str
    trip_id: Optional[str] = None
    featured: bool
    created_at: datetime


class BookingSchema(DomainSchema):
    id: str
    trip_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    number_of_travelers: int
    total_amount: float
    payment_status: PaymentStatus
    booking_date: datetime
    special_requests: Optional[str] = None
    travelers: List[TravelerSchema]
    payment_id: Optional[str] = None
    payment_method: Optional[str] = None


class CustomerSchema(DomainSchema):
    id: str
    name: str
    email: str
    phone: str
    bookings: List[str]
    total_spent: float
    preferences: List[str]
    created_at: datetime
    segment: Optional[CustomerSegment] = None


class SiteSettingsSchema(DomainSchema):
    site_name: str
    contact_email: str
    contact_phone: str
    address: str
    social_media: Dict[str, str]


class PaymentReceiptSchema(DomainSchema):
    id: str
    payment_id: str
    amount: float
    currency: str
    date: str
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    trip_title: Optional[str] = None
    travelers: Optional[int] = None
    payment_method: str


class CheckoutResponse(DomainSchema):
    success: bool
    payment_id: str
    error: Optional[str] = None
    booking: Optional[BookingSchema] = None
    customer: Optional[CustomerSchema] = None
    receipt: Optional[PaymentReceiptSchema] = None

    @classmethod
    def from_domain(cls, obj: Any) -> "CheckoutResponse":
        return cls(
            success=obj.success,
            payment_id=obj.payment.payment_id,
            error=obj.error,
            booking=BookingSchema.from_domain(obj.booking) if obj.booking else None,
            customer=CustomerSchema.from_domain(obj.customer) if obj.customer else None,
            receipt=PaymentReceiptSchema.from_domain(obj.receipt) if obj.receipt else None,
        )


class LogEntrySchema(DomainSchema):
    id: str
    timestamp: datetime
    level: LogLevel
    component: str
    message: str
    context: Optional[Dict[str, Any]] = None
    stack: Optional[str] = None


class HealthChecksSchema(DomainSchema):
    data_store: bool
    local_storage: bool
    payment_service: bool
    memory_usage: float
    error_count: int


class HealthMetricsSchema(DomainSchema):
    total_trips: int
    total_bookings: int
    total_customers: int
    total_blogs: int
    data_size: int


class SystemHealthSchema(DomainSchema):
    status: HealthStatus
    timestamp: datetime
    checks: HealthChecksSchema
    metrics: HealthMetricsSchema


class AuthStateSchema(DomainSchema):
    is_authenticated: bool
    username: Optional[str] = None


class ImportResponse(BaseModel):
    success: bool
    backups: List[str]

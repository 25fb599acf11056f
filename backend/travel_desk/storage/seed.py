"""First-run sample content, inserted without validation when the store has no trips."""
from datetime import datetime, timedelta
from typing import Any, Dict

from travel_desk.models.domain import SiteSettings

DEFAULT_SETTINGS = SiteSettings(
    site_name="TravelBabaVoyage",
    contact_email="info@travelbabavoyage.com",
    contact_phone="+91 98765 43210",
    address="Mumbai, Maharashtra, India",
    social_media={
        "instagram": "https://instagram.com/travelbabavoyage",
        "facebook": "https://facebook.com/travelbabavoyage",
    },
)


def sample_trip(now: datetime) -> Dict[str, Any]:
    start = (now + timedelta(days=60)).date()
    return {
        "id": "TRIP_001",
        "title": "Konkan-Goa: A Tour on the Water's Edge",
        "subtitle": "Beaches, forts, seafood & sunsets",
        "location": "Goa & Konkan Coast, India",
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(days=6)).isoformat(),
        "price": 34999,
        "currency": "INR",
        "capacity": 24,
        "availableSeats": 12,
        "coverImage": "/goa-beach-sunset.png",
        "gallery": ["/konkan-coast.png", "/goa-fort.png"],
        "categories": ["Beach", "Culture", "Maharashtra", "Goa"],
        "highlights": ["Dudhsagar trek", "Fort Aguada sunset", "Local seafood trail"],
        "itinerary": [
            {"day": 1, "title": "Arrive in Goa", "details": "Welcome dinner by the beach"},
            {"day": 2, "title": "North Goa heritage", "details": "Forts and churches"},
        ],
        "mapUrl": "https://maps.google.com/?q=Goa",
        "featured": True,
        "description": "Coastal scenery and heritage along the Konkan coast.",
        "createdAt": now.isoformat(),
        "updatedAt": now.isoformat(),
    }


def sample_testimonial(now: datetime) -> Dict[str, Any]:
    return {
        "id": "TEST_001",
        "name": "Aarav Shah",
        "role": "Guest, Konkan-Goa",
        "rating": 5,
        "photo": "/happy-traveler.png",
        "text": "Flawless planning and great hosts. The Konkan-Goa trip exceeded all expectations!",
        "featured": True,
        "createdAt": now.isoformat(),
    }


def sample_blog(now: datetime) -> Dict[str, Any]:
    return {
        "id": "BLOG_001",
        "title": "Diwali in Maharashtra: Traditions & Trails",
        "slug": "diwali-in-maharashtra-traditions",
        "excerpt": "From lanterns to faral, the festive heart of Maharashtra.",
        "cover": "/diwali-maharashtra-celebration.png",
        "author": "Team TravelBabaVoyage",
        "date": now.date().isoformat(),
        "tags": ["Maharashtra", "Festivals", "Culture"],
        "content": "# Diwali in Maharashtra\n\nLamps, rangoli and sweets across Maharashtra...",
        "published": True,
        "readingTime": 1,
        "createdAt": now.isoformat(),
        "updatedAt": now.isoformat(),
    }

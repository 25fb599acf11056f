import math
import re
from typing import Any, Dict, Mapping

WORDS_PER_MINUTE = 200

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def estimate_reading_time(content: str) -> int:
    return math.ceil(len(content.split()) / WORDS_PER_MINUTE)


def generate_slug(title: str) -> str:
    return _NON_SLUG.sub("-", title.lower()).strip("-")


def prepare_blog_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill the editor defaults: slug from title, SEO fields from title and excerpt."""
    data = dict(payload)
    title = data.get("title") or ""
    if not data.get("slug") and title:
        data["slug"] = generate_slug(title)
    if not data.get("meta_title"):
        data["meta_title"] = title or None
    if not data.get("meta_description"):
        data["meta_description"] = data.get("excerpt") or None
    if isinstance(data.get("tags"), str):
        data["tags"] = [tag.strip() for tag in data["tags"].split(",") if tag.strip()]
    return data

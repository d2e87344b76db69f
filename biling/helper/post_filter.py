"""Filtering of posts for the browse screen.

Everything here is pure: the caller loads the posts and the viewer, and these
functions decide which posts are shown. A post is kept only when all of the
following hold:

1. its type equals the requested type,
2. its category equals the requested category (or no category was asked for),
3. it lies within the requested radius of the viewer (or no radius was asked for),
4. its title contains the keyword, case-insensitively (or no keyword was given),
5. it has not expired yet.
"""
import math
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Type, TypeVar

from biling.errors import InvalidValueError
from biling.models import Category, Post, PostImage, PostType

EARTH_RADIUS_KM = 6371

ALL_CATEGORIES = "ALL"
UNLIMITED_RADIUS = "unlimited"

_RADIUS_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(km)?\s*$", re.IGNORECASE)

E = TypeVar("E")


# --- Parsing of query values ---

def parse_enum(enum_cls: Type[E], value: str, field: str) -> E:
    """Case-insensitive lookup of ``value`` among the members of ``enum_cls``."""
    if value is None:
        raise InvalidValueError(f"{field} is required", reason=f"invalid_{field}")
    wanted = value.strip().upper()
    for member in enum_cls:
        if member.value.upper() == wanted:
            return member
    allowed = ", ".join(member.value for member in enum_cls)
    raise InvalidValueError(
        f"Invalid {field} '{value}'. Allowed values: {allowed}",
        reason=f"invalid_{field}",
    )


def parse_post_type(value: str) -> PostType:
    return parse_enum(PostType, value, "type")


def parse_category(value: Optional[str]) -> Optional[Category]:
    """``None`` (or "ALL") means no category filter."""
    if value is None or value.strip().upper() == ALL_CATEGORIES:
        return None
    return parse_enum(Category, value, "category")


def parse_radius(value: Optional[str]) -> Optional[float]:
    """Turn "5km", "2.5 km" or "10" into kilometers; ``None`` means unlimited."""
    if value is None or value.strip().lower() == UNLIMITED_RADIUS:
        return None
    match = _RADIUS_RE.match(value)
    if not match:
        raise InvalidValueError(f"Invalid radius '{value}'", reason="invalid_radius")
    return float(match.group(1))


# --- Geometry ---

def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


# --- Predicates ---

def matches_type(post: Post, post_type: PostType) -> bool:
    return post.type == post_type


def matches_category(post: Post, category: Optional[Category]) -> bool:
    return category is None or post.category == category


def within_radius(post: Post, radius_km: Optional[float],
                  viewer_latitude: Optional[float], viewer_longitude: Optional[float]) -> bool:
    if radius_km is None:
        return True
    distance = haversine_km(viewer_latitude, viewer_longitude,
                            post.location_latitude, post.location_longitude)
    return distance <= radius_km


def matches_keyword(post: Post, keyword: Optional[str]) -> bool:
    return keyword is None or keyword.lower() in post.title.lower()


def is_active(post: Post, now: datetime) -> bool:
    return as_utc(post.expiration_date) > as_utc(now)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Pipeline ---

def newest_first(posts: Iterable[Post]) -> List[Post]:
    return sorted(posts, key=lambda post: (as_utc(post.created_at), post.id), reverse=True)


def filter_posts(
    posts: Iterable[Post],
    post_type: PostType,
    category: Optional[Category] = None,
    radius_km: Optional[float] = None,
    keyword: Optional[str] = None,
    viewer_latitude: Optional[float] = None,
    viewer_longitude: Optional[float] = None,
    now: Optional[datetime] = None,
) -> List[Post]:
    if radius_km is not None and (viewer_latitude is None or viewer_longitude is None):
        raise InvalidValueError(
            "Set your location before filtering by radius", reason="location_required"
        )
    if now is None:
        now = datetime.now(timezone.utc)

    kept = [
        post for post in posts
        if matches_type(post, post_type)
        and matches_category(post, category)
        and within_radius(post, radius_km, viewer_latitude, viewer_longitude)
        and matches_keyword(post, keyword)
        and is_active(post, now)
    ]
    return newest_first(kept)


def representative_image(post: Post) -> Optional[PostImage]:
    """The image with the lowest order sequence, if the post has any."""
    if not post.images:
        return None
    return min(post.images, key=lambda image: image.order_sequence)

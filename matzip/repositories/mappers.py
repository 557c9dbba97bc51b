"""
repositories/mappers.py
-----------------------
Conversion between persisted records and domain models.

``*_to_domain`` reads a record into an immutable model.
``apply_*`` writes a model into a (possibly new) record and stamps timestamps:
``updated_at`` on every call, ``created_at`` only when the record is new.

List-valued fields (image URLs, restaurant ids) live in one JSON blob column.
Encoding failures store NULL and anything undecodable reads back as an empty
list; neither is ever raised.
"""

import json
import threading
from datetime import datetime, timedelta
from typing import Iterable, Optional

from matzip.db.records import ReviewRecord, RestaurantRecord, UserFollowRecord, UserListRecord
from matzip.models import (
    Coordinate,
    PriceRange,
    Restaurant,
    RestaurantCategory,
    Review,
    UserFollow,
    UserList,
)

_clock_lock = threading.Lock()
_last_stamp: Optional[datetime] = None


def now() -> datetime:
    """Current local time, strictly increasing across calls in this process."""
    global _last_stamp
    with _clock_lock:
        stamp = datetime.now()
        if _last_stamp is not None and stamp <= _last_stamp:
            stamp = _last_stamp + timedelta(microseconds=1)
        _last_stamp = stamp
        return stamp


def _stamp(record, created: bool) -> None:
    stamp = now()
    if created:
        record.created_at = stamp
    record.updated_at = stamp


# ── List blobs ────────────────────────────────────────────

def encode_string_list(values: Iterable[str]) -> Optional[bytes]:
    """
    Serialize strings to a compact JSON array.

    Returns:
        UTF-8 bytes, or None if the values cannot be encoded.
    """
    try:
        items = list(values)
        if not all(isinstance(item, str) for item in items):
            return None
        return json.dumps(items, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError):
        return None


def decode_string_list(blob: Optional[bytes]) -> list[str]:
    """Inverse of encode_string_list. Missing or corrupt input gives []."""
    if blob is None:
        return []
    try:
        items = json.loads(blob)
    except (TypeError, ValueError):
        return []
    if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
        return []
    return items


# ── Restaurant ────────────────────────────────────────────

def restaurant_to_domain(record: RestaurantRecord) -> Restaurant:
    return Restaurant(
        id=record.id or "",
        name=record.name or "",
        category=RestaurantCategory.from_raw(record.category_raw_value),
        address=record.address or "",
        coordinate=Coordinate(record.latitude or 0.0, record.longitude or 0.0),
        phone_number=record.phone_number,
        rating=record.rating or 0.0,
        review_count=record.review_count or 0,
        price_range=PriceRange.from_raw(record.price_range_raw_value),
        description=record.restaurant_description or "",
        image_urls=decode_string_list(record.image_urls_data),
        is_favorite=bool(record.is_favorite),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def apply_restaurant(record: RestaurantRecord, restaurant: Restaurant, created: bool = False) -> RestaurantRecord:
    record.id = restaurant.id
    record.name = restaurant.name
    record.category_raw_value = restaurant.category.value
    record.address = restaurant.address
    record.latitude = restaurant.coordinate.latitude
    record.longitude = restaurant.coordinate.longitude
    record.phone_number = restaurant.phone_number
    record.rating = restaurant.rating
    record.review_count = restaurant.review_count
    record.price_range_raw_value = int(restaurant.price_range)
    record.restaurant_description = restaurant.description
    record.image_urls_data = encode_string_list(restaurant.image_urls)
    record.is_favorite = restaurant.is_favorite
    _stamp(record, created)
    return record


# ── Review ────────────────────────────────────────────────

def review_to_domain(record: ReviewRecord) -> Review:
    return Review(
        id=record.id or "",
        restaurant_id=record.restaurant_id or "",
        user_id=record.user_id or "",
        user_name=record.user_name or "",
        user_profile_image=record.user_profile_image_url,
        rating=record.rating or 0.0,
        content=record.comment or "",
        image_urls=decode_string_list(record.image_urls_data),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def apply_review(record: ReviewRecord, review: Review, created: bool = False) -> ReviewRecord:
    record.id = review.id
    record.restaurant_id = review.restaurant_id
    record.user_id = review.user_id
    record.user_name = review.user_name
    record.user_profile_image_url = review.user_profile_image
    record.rating = review.rating
    record.comment = review.content
    record.image_urls_data = encode_string_list(review.image_urls)
    _stamp(record, created)
    # The visit date is the day the review was first written.
    record.visit_date = record.created_at
    return record


# ── UserList ──────────────────────────────────────────────

def user_list_to_domain(record: UserListRecord) -> UserList:
    return UserList(
        id=record.id or "",
        user_id=record.user_id or "",
        name=record.name or "",
        description=record.list_description,
        restaurant_ids=decode_string_list(record.restaurant_ids_data),
        is_public=bool(record.is_public),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def apply_user_list(record: UserListRecord, user_list: UserList, created: bool = False) -> UserListRecord:
    record.id = user_list.id
    record.user_id = user_list.user_id
    record.name = user_list.name
    record.list_description = user_list.description
    record.restaurant_ids_data = encode_string_list(user_list.restaurant_ids)
    record.is_public = user_list.is_public
    _stamp(record, created)
    return record


# ── UserFollow ────────────────────────────────────────────

def user_follow_to_domain(record: UserFollowRecord) -> UserFollow:
    return UserFollow(
        id=record.id or "",
        follower_id=record.follower_id or "",
        following_id=record.following_id or "",
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def apply_user_follow(record: UserFollowRecord, follow: UserFollow, created: bool = False) -> UserFollowRecord:
    record.id = follow.id
    record.follower_id = follow.follower_id
    record.following_id = follow.following_id
    _stamp(record, created)
    return record

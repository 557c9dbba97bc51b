from __future__ import annotations

from dataclasses import replace

from matzip.db.records import ReviewRecord, RestaurantRecord, UserFollowRecord, UserListRecord
from matzip.models import PriceRange, RestaurantCategory, UserFollow, UserList
from matzip.repositories.mappers import (
    apply_restaurant,
    apply_review,
    apply_user_follow,
    apply_user_list,
    decode_string_list,
    encode_string_list,
    now,
    restaurant_to_domain,
    review_to_domain,
    user_follow_to_domain,
    user_list_to_domain,
)
from tests.factories import make_restaurant, make_review


def _without_timestamps(entity):
    return replace(entity, created_at=None, updated_at=None)


def test_restaurant_round_trip():
    restaurant = make_restaurant(is_favorite=True, rating=4.2, review_count=12)
    record = apply_restaurant(RestaurantRecord(), restaurant, created=True)
    assert _without_timestamps(restaurant_to_domain(record)) == restaurant


def test_review_round_trip():
    review = make_review("v1", user_profile_image="https://img.example.com/me.png")
    record = apply_review(ReviewRecord(), review, created=True)
    assert _without_timestamps(review_to_domain(record)) == review
    assert record.visit_date == record.created_at


def test_user_list_round_trip():
    user_list = UserList(user_id="u1", name="데이트", description=None,
                         restaurant_ids=("r1", "r2"), is_public=True)
    record = apply_user_list(UserListRecord(), user_list, created=True)
    assert _without_timestamps(user_list_to_domain(record)) == user_list


def test_user_follow_round_trip():
    follow = UserFollow(follower_id="u1", following_id="u2")
    record = apply_user_follow(UserFollowRecord(), follow, created=True)
    assert _without_timestamps(user_follow_to_domain(record)) == follow


def test_created_at_only_stamped_on_creation():
    restaurant = make_restaurant()
    record = apply_restaurant(RestaurantRecord(), restaurant, created=True)
    created_at = record.created_at
    first_update = record.updated_at

    apply_restaurant(record, replace(restaurant, name="New"), created=False)

    assert record.created_at == created_at
    assert record.updated_at > first_update


def test_updated_at_strictly_advances():
    record = RestaurantRecord()
    restaurant = make_restaurant()
    stamps = []
    for _ in range(50):
        apply_restaurant(record, restaurant)
        stamps.append(record.updated_at)
    assert all(a < b for a, b in zip(stamps, stamps[1:]))


def test_now_is_monotonic():
    values = [now() for _ in range(1000)]
    assert values == sorted(values)
    assert len(set(values)) == len(values)


def test_encode_is_compact_and_ordered():
    assert encode_string_list(["b", "a", "b"]) == b'["b","a","b"]'
    assert encode_string_list([]) == b"[]"


def test_encode_keeps_unicode():
    assert decode_string_list(encode_string_list(["한식"])) == ["한식"]


def test_encode_failure_yields_none():
    assert encode_string_list(None) is None
    assert encode_string_list([object()]) is None
    assert encode_string_list([1, 2]) is None


def test_decode_missing_or_corrupt_blob_is_empty():
    assert decode_string_list(None) == []
    assert decode_string_list(b"") == []
    assert decode_string_list(b"\xff\xfe\x00garbage") == []
    assert decode_string_list(b"not json") == []
    assert decode_string_list(b'{"a": 1}') == []
    assert decode_string_list(b"[1, 2]") == []


def test_record_with_corrupt_blob_maps_to_empty_list():
    record = apply_restaurant(RestaurantRecord(), make_restaurant(), created=True)
    record.image_urls_data = b"\x00\x01corrupt"
    assert restaurant_to_domain(record).image_urls == ()


def test_missing_optional_strings_get_defaults():
    record = RestaurantRecord()
    record.id = "r9"
    restaurant = restaurant_to_domain(record)
    assert restaurant.name == ""
    assert restaurant.address == ""
    assert restaurant.description == ""
    assert restaurant.phone_number is None
    assert restaurant.image_urls == ()
    assert restaurant.created_at is None


def test_unknown_raw_values_fall_back():
    record = apply_restaurant(RestaurantRecord(), make_restaurant(), created=True)
    record.category_raw_value = "브런치"
    record.price_range_raw_value = 9
    restaurant = restaurant_to_domain(record)
    assert restaurant.category is RestaurantCategory.OTHER
    assert restaurant.price_range is PriceRange.MEDIUM


def test_list_duplicates_collapse_before_encoding():
    user_list = UserList(user_id="u1", name="n", restaurant_ids=["r1", "r2", "r1"])
    record = apply_user_list(UserListRecord(), user_list, created=True)
    assert decode_string_list(record.restaurant_ids_data) == ["r1", "r2"]

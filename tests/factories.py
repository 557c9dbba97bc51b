from __future__ import annotations

from matzip.models import Coordinate, PriceRange, Restaurant, RestaurantCategory, Review


def make_restaurant(restaurant_id: str = "r1", name: str = "명동교자", **overrides) -> Restaurant:
    fields = dict(
        id=restaurant_id,
        name=name,
        category=RestaurantCategory.KOREAN,
        address="서울특별시 중구 명동2가 25-2",
        coordinate=Coordinate(37.5638, 126.9838),
        phone_number="02-776-5348",
        rating=0.0,
        review_count=0,
        price_range=PriceRange.LOW,
        description="60년 전통의 명동 대표 만두집",
        image_urls=("https://img.example.com/1.jpg", "https://img.example.com/2.jpg"),
        is_favorite=False,
    )
    fields.update(overrides)
    return Restaurant(**fields)


def make_review(review_id: str, restaurant_id: str = "r1", rating: float = 4.0, **overrides) -> Review:
    fields = dict(
        id=review_id,
        restaurant_id=restaurant_id,
        user_id="u1",
        user_name="Test",
        user_profile_image=None,
        rating=rating,
        content="맛있어요",
        image_urls=("https://img.example.com/review.jpg",),
    )
    fields.update(overrides)
    return Review(**fields)

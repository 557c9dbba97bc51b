"""
models/review.py
----------------
Domain model for restaurant reviews.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Review:
    """
    A user's review of one restaurant.

    Attributes:
        id: Unique string identifier.
        restaurant_id: The reviewed restaurant; must exist in the store.
        user_id: Author id.
        user_name: Author display name.
        user_profile_image: Optional author avatar URL.
        rating: 0.0 to 5.0.
        content: Review text.
        image_urls: Ordered image URLs.
        created_at: Set by the store on first insert.
        updated_at: Refreshed by the store on every write.
    """
    id: str
    restaurant_id: str
    user_id: str
    user_name: str
    rating: float
    content: str = ""
    user_profile_image: Optional[str] = None
    image_urls: tuple[str, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "image_urls", tuple(self.image_urls))

    def __str__(self) -> str:
        return f"★{self.rating:.1f} by {self.user_name} on {self.restaurant_id}"

"""
models/restaurant.py
--------------------
Domain model for restaurants and their value types.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional


class RestaurantCategory(str, Enum):
    """Cuisine tag. Values are the raw strings stored in the database."""
    KOREAN = "한식"
    CHINESE = "중식"
    JAPANESE = "일식"
    WESTERN = "양식"
    CAFE = "카페"
    FASTFOOD = "패스트푸드"
    DESSERT = "디저트"
    OTHER = "기타"

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> "RestaurantCategory":
        """Parse a stored raw value, falling back to OTHER."""
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER


class PriceRange(IntEnum):
    """Price tier, 1 (cheapest) to 4."""
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    LUXURY = 4

    @classmethod
    def from_raw(cls, raw: Optional[int]) -> "PriceRange":
        """Parse a stored tier, falling back to MEDIUM."""
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM

    @property
    def display_text(self) -> str:
        return "₩" * self.value


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Restaurant:
    """
    Represents a single restaurant.

    Attributes:
        id: Unique string identifier.
        name: Display name.
        category: Cuisine tag.
        address: Free-text address.
        coordinate: Latitude/longitude pair.
        phone_number: Optional contact number.
        rating: Average rating, 0.0 to 5.0.
        review_count: Number of reviews the rating is based on.
        price_range: Price tier.
        description: Free-text description.
        image_urls: Ordered image URLs.
        is_favorite: Whether the current user marked it as a favorite.
        created_at: Set by the store on first insert.
        updated_at: Refreshed by the store on every write.
    """
    id: str
    name: str
    category: RestaurantCategory = RestaurantCategory.OTHER
    address: str = ""
    coordinate: Coordinate = Coordinate(0.0, 0.0)
    phone_number: Optional[str] = None
    rating: float = 0.0
    review_count: int = 0
    price_range: PriceRange = PriceRange.MEDIUM
    description: str = ""
    image_urls: tuple[str, ...] = field(default_factory=tuple)
    is_favorite: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        # Accept any iterable of URLs but always hold an immutable tuple.
        object.__setattr__(self, "image_urls", tuple(self.image_urls))

    def __str__(self) -> str:
        return f"{self.name} [{self.category.value}] ★{self.rating:.1f} ({self.review_count})"

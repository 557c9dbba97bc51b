"""
models/user_list.py
-------------------
Domain model for user-curated restaurant lists.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional
from uuid import uuid4


def _unique(ids: Iterable[str]) -> tuple[str, ...]:
    """Drop repeated ids, keeping the first occurrence of each."""
    return tuple(dict.fromkeys(ids))


@dataclass(frozen=True)
class UserList:
    """
    A named, ordered collection of restaurant ids owned by one user.

    Attributes:
        id: Unique string identifier (random UUID by default).
        user_id: Owner id.
        name: List title.
        description: Optional free text.
        restaurant_ids: Ordered member ids, never repeated.
        is_public: Whether followers can see the list.
        created_at: Set by the store on first insert.
        updated_at: Refreshed by the store on every write.
    """
    user_id: str
    name: str
    description: Optional[str] = None
    restaurant_ids: tuple[str, ...] = field(default_factory=tuple)
    is_public: bool = False
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "restaurant_ids", _unique(self.restaurant_ids))

    @property
    def restaurant_count(self) -> int:
        return len(self.restaurant_ids)

    def with_restaurant(self, restaurant_id: str) -> "UserList":
        """Return a copy containing `restaurant_id` (unchanged if already present)."""
        if restaurant_id in self.restaurant_ids:
            return self
        return replace(self, restaurant_ids=self.restaurant_ids + (restaurant_id,))

    def without_restaurant(self, restaurant_id: str) -> "UserList":
        """Return a copy with `restaurant_id` removed."""
        return replace(
            self,
            restaurant_ids=tuple(rid for rid in self.restaurant_ids if rid != restaurant_id),
        )

    def __str__(self) -> str:
        visibility = "public" if self.is_public else "private"
        return f"{self.name} ({self.restaurant_count} restaurants, {visibility})"

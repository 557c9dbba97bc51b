"""
models/ - Domain Models
=======================
Immutable value objects handed to and returned from the data-access layer.
They carry no persistence state; the repositories map them to records.
"""

from matzip.models.restaurant import Coordinate, PriceRange, Restaurant, RestaurantCategory
from matzip.models.review import Review
from matzip.models.user_follow import FollowStatus, UserFollow
from matzip.models.user_list import UserList

__all__ = [
    "Coordinate",
    "FollowStatus",
    "PriceRange",
    "Restaurant",
    "RestaurantCategory",
    "Review",
    "UserFollow",
    "UserList",
]

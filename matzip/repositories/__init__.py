"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all queries for a specific domain entity.
Repositories read records through the session of the calling context and
return domain model objects; ``mappers`` holds the record <-> model conversion.
"""

from matzip.repositories.restaurant_repo import RestaurantRepository
from matzip.repositories.review_repo import ReviewRepository
from matzip.repositories.user_follow_repo import UserFollowRepository
from matzip.repositories.user_list_repo import UserListRepository

__all__ = [
    "RestaurantRepository",
    "ReviewRepository",
    "UserFollowRepository",
    "UserListRepository",
]

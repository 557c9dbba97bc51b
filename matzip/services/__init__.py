"""
services/ - Data Access Service
===============================
Asynchronous API over the repositories. Every call is queued on a store
context and awaited; writes are committed before the call returns.
"""

from matzip.services.data_access import DataAccessService
from matzip.services.entity_service import EntityService
from matzip.services.restaurant_service import RestaurantService
from matzip.services.review_service import ReviewService
from matzip.services.user_follow_service import UserFollowService
from matzip.services.user_list_service import UserListService

__all__ = [
    "DataAccessService",
    "EntityService",
    "RestaurantService",
    "ReviewService",
    "UserFollowService",
    "UserListService",
]

"""
services/review_service.py
--------------------------
Async API for reviews. Writes keep the reviewed restaurant's rating
and review count in step within the same commit.
"""

from matzip.models import Review
from matzip.repositories.review_repo import ReviewRepository
from matzip.services.entity_service import EntityService


class ReviewService(EntityService[Review]):
    """Reviews, newest first. Their parent is the restaurant."""

    repository_class = ReviewRepository

    async def fetch_for_restaurant(self, restaurant_id: str) -> list[Review]:
        return await self.fetch_children(restaurant_id)

    async def fetch_by_user(self, user_id: str) -> list[Review]:
        return await self._read(lambda repo: repo.fetch_by_user(user_id))

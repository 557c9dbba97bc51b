"""
services/restaurant_service.py
------------------------------
Async API for restaurants: CRUD plus favorites and category browsing.
"""

from dataclasses import replace
from typing import Optional

from matzip.models import Restaurant, RestaurantCategory
from matzip.repositories.restaurant_repo import RestaurantRepository
from matzip.services.entity_service import EntityService
from matzip.utils.logger import get_logger

logger = get_logger(__name__)


class RestaurantService(EntityService[Restaurant]):
    """
    Restaurants sorted by name.

    Deleting a restaurant also deletes its reviews; lists that contained it
    are kept and simply stop resolving it.
    """

    repository_class = RestaurantRepository

    async def fetch_favorites(self) -> list[Restaurant]:
        return await self._read(lambda repo: repo.fetch_favorites())

    async def fetch_by_category(self, category: RestaurantCategory) -> list[Restaurant]:
        return await self._read(lambda repo: repo.fetch_by_category(category))

    async def set_favorite(self, restaurant_id: str, is_favorite: bool) -> Optional[Restaurant]:
        """
        Mark or unmark a restaurant as a favorite.

        Returns:
            The updated restaurant, or None if it does not exist.
        """
        def action(repo: RestaurantRepository):
            current = repo.get_by_id(restaurant_id)
            if current is None:
                return None
            if current.is_favorite == is_favorite:
                return repo.get_record(restaurant_id)
            return repo.upsert(replace(current, is_favorite=is_favorite))

        return await self._write(action, map_back=True)

    async def refresh_stats(self, restaurant_id: str) -> Optional[Restaurant]:
        """Recompute rating and review count from the stored reviews."""
        def action(repo: RestaurantRepository):
            record = repo.get_record(restaurant_id)
            repo.refresh_stats(record)
            return record

        return await self._write(action, map_back=True)

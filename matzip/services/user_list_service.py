"""
services/user_list_service.py
-----------------------------
Async API for user restaurant lists and their membership.
"""

from typing import Iterable, Optional

from matzip.models import Restaurant, UserList
from matzip.repositories.user_list_repo import UserListRepository
from matzip.services.entity_service import EntityService
from matzip.utils.logger import get_logger

logger = get_logger(__name__)


class UserListService(EntityService[UserList]):
    """Lists, newest first. Their parent is the owning user id."""

    repository_class = UserListRepository

    async def fetch_for_user(self, user_id: str) -> list[UserList]:
        return await self.fetch_children(user_id)

    async def fetch_public(self) -> list[UserList]:
        return await self._read(lambda repo: repo.fetch_public())

    async def fetch_for_users(self, user_ids: Iterable[str]) -> list[UserList]:
        """Public lists of the given users (e.g. everyone the viewer follows)."""
        ids = list(user_ids)
        return await self._read(lambda repo: repo.fetch_public_for_users(ids))

    async def fetch_restaurants(self, list_id: str) -> list[Restaurant]:
        """Stored restaurants of a list, in list order. Deleted ones are skipped."""
        return await self._read(lambda repo: repo.fetch_restaurants(list_id))

    async def create_list(
        self,
        user_id: str,
        name: str,
        description: Optional[str] = None,
        is_public: bool = False,
    ) -> UserList:
        """Create an empty list owned by ``user_id``."""
        return await self.upsert(
            UserList(user_id=user_id, name=name, description=description, is_public=is_public)
        )

    async def add_restaurant(self, list_id: str, restaurant_id: str) -> Optional[UserList]:
        """
        Append a restaurant to a list.

        Adding an id that is already a member writes nothing.

        Returns:
            The list after the change, or None if the list does not exist.
        """
        def action(repo: UserListRepository):
            current = repo.get_by_id(list_id)
            if current is None:
                return None
            updated = current.with_restaurant(restaurant_id)
            if updated is current:
                logger.info(f"Restaurant {restaurant_id} already in list {list_id}")
                return repo.get_record(list_id)
            return repo.upsert(updated)

        return await self._write(action, map_back=True)

    async def remove_restaurant(self, list_id: str, restaurant_id: str) -> Optional[UserList]:
        """Remove a restaurant from a list. Returns None if the list does not exist."""
        def action(repo: UserListRepository):
            current = repo.get_by_id(list_id)
            if current is None:
                return None
            if restaurant_id not in current.restaurant_ids:
                return repo.get_record(list_id)
            return repo.upsert(current.without_restaurant(restaurant_id))

        return await self._write(action, map_back=True)

"""
services/user_follow_service.py
-------------------------------
Async API for the follow graph between users.
"""

from typing import Optional

from matzip.models import FollowStatus, UserFollow
from matzip.repositories.user_follow_repo import UserFollowRepository
from matzip.services.entity_service import EntityService
from matzip.utils.logger import get_logger

logger = get_logger(__name__)


class UserFollowService(EntityService[UserFollow]):
    """
    Follow edges, newest first.

    ``fetch_children(user_id)`` returns every edge the user is on,
    as follower or as the one being followed.
    """

    repository_class = UserFollowRepository

    async def fetch_for_user(self, user_id: str) -> list[UserFollow]:
        return await self.fetch_children(user_id)

    async def fetch_followers(self, user_id: str) -> list[UserFollow]:
        return await self._read(lambda repo: repo.fetch_followers(user_id))

    async def fetch_following(self, user_id: str) -> list[UserFollow]:
        return await self._read(lambda repo: repo.fetch_following(user_id))

    async def follow(self, follower_id: str, following_id: str) -> UserFollow:
        """
        Record that ``follower_id`` follows ``following_id``.

        Returns:
            The stored edge. An existing edge is returned without a write.
        """
        def action(repo: UserFollowRepository):
            existing = repo.find_edge(follower_id, following_id)
            if existing is not None:
                return repo.get_record(existing.id)
            logger.info(f"User {follower_id} now follows {following_id}")
            return repo.upsert(UserFollow(follower_id=follower_id, following_id=following_id))

        return await self._write(action, map_back=True)

    async def unfollow(self, follower_id: str, following_id: str) -> int:
        """Remove the edge(s) from follower to following. Returns how many were removed."""
        removed = await self._write(lambda repo: repo.delete_edges(follower_id, following_id))
        if removed:
            logger.info(f"User {follower_id} unfollowed {following_id}")
        return removed

    async def is_following(self, follower_id: str, following_id: str) -> bool:
        edge: Optional[UserFollow] = await self._read(
            lambda repo: repo.find_edge(follower_id, following_id)
        )
        return edge is not None

    async def follow_status(self, user_id: str, other_id: str) -> FollowStatus:
        """How ``user_id`` and ``other_id`` are connected, seen from ``user_id``."""
        def action(repo: UserFollowRepository) -> FollowStatus:
            return FollowStatus.from_flags(
                repo.find_edge(user_id, other_id) is not None,
                repo.find_edge(other_id, user_id) is not None,
            )

        return await self._read(action)

    async def followers_count(self, user_id: str) -> int:
        return await self._read(lambda repo: repo.count_followers(user_id))

    async def following_count(self, user_id: str) -> int:
        return await self._read(lambda repo: repo.count_following(user_id))

    async def following_ids(self, user_id: str) -> set[str]:
        return await self._read(lambda repo: repo.following_ids(user_id))

    async def mutual_following_count(self, user_id: str, other_id: str) -> int:
        """Number of users followed by both ``user_id`` and ``other_id``."""
        def action(repo: UserFollowRepository) -> int:
            return len(repo.following_ids(user_id) & repo.following_ids(other_id))

        return await self._read(action)

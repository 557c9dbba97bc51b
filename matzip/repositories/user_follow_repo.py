"""
repositories/user_follow_repo.py
--------------------------------
Data access layer for follow edges between users.
"""

from typing import Optional

from sqlalchemy import func, or_, select

from matzip.db.records import UserFollowRecord
from matzip.models import UserFollow
from matzip.repositories.base_repo import BaseRepository
from matzip.repositories.mappers import apply_user_follow, user_follow_to_domain


class UserFollowRepository(BaseRepository[UserFollow]):
    """Repository for the user_follows table."""

    entity_name = "UserFollow"
    to_domain = staticmethod(user_follow_to_domain)
    apply = staticmethod(apply_user_follow)

    def _children_filter(self, user_id: str):
        # A user is a "parent" of every edge they appear on, either side.
        return or_(UserFollowRecord.follower_id == user_id, UserFollowRecord.following_id == user_id)

    def find_edge(self, follower_id: str, following_id: str) -> Optional[UserFollow]:
        stmt = (
            select(UserFollowRecord)
            .where(
                UserFollowRecord.follower_id == follower_id,
                UserFollowRecord.following_id == following_id,
            )
            .limit(1)
        )
        record = self.session.scalars(stmt).first()
        return self.to_domain(record) if record is not None else None

    def fetch_followers(self, user_id: str) -> list[UserFollow]:
        return self._fetch(UserFollowRecord.following_id == user_id)

    def fetch_following(self, user_id: str) -> list[UserFollow]:
        return self._fetch(UserFollowRecord.follower_id == user_id)

    def following_ids(self, user_id: str) -> set[str]:
        stmt = select(UserFollowRecord.following_id).where(UserFollowRecord.follower_id == user_id)
        return set(self.session.scalars(stmt).all())

    def count_followers(self, user_id: str) -> int:
        stmt = select(func.count(UserFollowRecord.id)).where(UserFollowRecord.following_id == user_id)
        return self.session.scalar(stmt)

    def count_following(self, user_id: str) -> int:
        stmt = select(func.count(UserFollowRecord.id)).where(UserFollowRecord.follower_id == user_id)
        return self.session.scalar(stmt)

    def delete_edges(self, follower_id: str, following_id: str) -> int:
        """Delete every edge from follower to following. Returns the count."""
        stmt = select(UserFollowRecord).where(
            UserFollowRecord.follower_id == follower_id,
            UserFollowRecord.following_id == following_id,
        )
        records = self.session.scalars(stmt).all()
        for record in records:
            self.session.delete(record)
        return len(records)

"""
models/user_follow.py
---------------------
Domain model for the directed follow edge between two users.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4


class FollowStatus(str, Enum):
    """Relationship between the current user and another user."""
    NONE = "none"
    FOLLOWING = "following"
    FOLLOWER = "follower"
    MUTUAL = "mutual"

    @classmethod
    def from_flags(cls, is_following: bool, is_followed_by: bool) -> "FollowStatus":
        if is_following and is_followed_by:
            return cls.MUTUAL
        if is_following:
            return cls.FOLLOWING
        if is_followed_by:
            return cls.FOLLOWER
        return cls.NONE


@dataclass(frozen=True)
class UserFollow:
    """`follower_id` follows `following_id`."""
    follower_id: str
    following_id: str
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __str__(self) -> str:
        return f"{self.follower_id} -> {self.following_id}"

"""
repositories/user_list_repo.py
------------------------------
Data access layer for user restaurant lists.

The ordered membership lives in the list's ``restaurant_ids_data`` blob.
The many-to-many ``restaurants`` relation mirrors it for the ids that
resolve to stored restaurants; deleting a restaurant drops it from the
relation while the list itself survives.
"""

from typing import Iterable

from sqlalchemy import select

from matzip.db.records import RestaurantRecord, UserListRecord
from matzip.models import Restaurant, UserList
from matzip.repositories.base_repo import BaseRepository
from matzip.repositories.mappers import (
    apply_user_list,
    decode_string_list,
    restaurant_to_domain,
    user_list_to_domain,
)


class UserListRepository(BaseRepository[UserList]):
    """Repository for the user_lists table; children of a user id."""

    entity_name = "UserList"
    to_domain = staticmethod(user_list_to_domain)
    apply = staticmethod(apply_user_list)

    def _children_filter(self, user_id: str):
        return UserListRecord.user_id == user_id

    def fetch_public(self) -> list[UserList]:
        return self._fetch(UserListRecord.is_public.is_(True))

    def fetch_public_for_users(self, user_ids: Iterable[str]) -> list[UserList]:
        """Public lists owned by any of the given users."""
        ids = list(user_ids)
        if not ids:
            return []
        return self._fetch(UserListRecord.user_id.in_(ids), UserListRecord.is_public.is_(True))

    def fetch_restaurants(self, list_id: str) -> list[Restaurant]:
        """
        Restaurants reachable through the list's membership relation,
        in the list's own order.
        """
        record = self.get_record(list_id)
        if record is None:
            return []
        stmt = (
            select(RestaurantRecord)
            .join(RestaurantRecord.lists)
            .where(UserListRecord.id == list_id)
        )
        found = {r.id: r for r in self.session.scalars(stmt).all()}
        order = decode_string_list(record.restaurant_ids_data)
        return [restaurant_to_domain(found[rid]) for rid in order if rid in found]

    def _after_write(self, record: UserListRecord) -> None:
        ids = decode_string_list(record.restaurant_ids_data)
        if ids:
            stmt = select(RestaurantRecord).where(RestaurantRecord.id.in_(ids))
            record.restaurants = list(self.session.scalars(stmt).all())
        else:
            record.restaurants = []

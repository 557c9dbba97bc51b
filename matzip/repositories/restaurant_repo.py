"""
repositories/restaurant_repo.py
-------------------------------
Data access layer for restaurants.
"""

import json
from typing import Optional

from sqlalchemy import LargeBinary, func, inspect, literal, select

from matzip.db.records import ReviewRecord, RestaurantRecord, UserListRecord
from matzip.models import Restaurant, RestaurantCategory
from matzip.repositories.base_repo import BaseRepository
from matzip.repositories.mappers import apply_restaurant, decode_string_list, now, restaurant_to_domain
from matzip.utils.logger import get_logger

logger = get_logger(__name__)


class RestaurantRepository(BaseRepository[Restaurant]):
    """Repository for the restaurants table. Restaurants have no parent."""

    entity_name = "Restaurant"
    to_domain = staticmethod(restaurant_to_domain)
    apply = staticmethod(apply_restaurant)

    # ── READ ──────────────────────────────────────────────

    def fetch_favorites(self) -> list[Restaurant]:
        return self._fetch(RestaurantRecord.is_favorite.is_(True))

    def fetch_by_category(self, category: RestaurantCategory) -> list[Restaurant]:
        return self._fetch(RestaurantRecord.category_raw_value == category.value)

    # ── DERIVED STATS ─────────────────────────────────────

    def refresh_stats(self, record: Optional[RestaurantRecord], reset_when_empty: bool = False) -> bool:
        """
        Make rating and review count mirror the restaurant's reviews.

        A restaurant without reviews keeps its stored values, unless
        ``reset_when_empty`` is set (its last review was just deleted), in
        which case the count drops to 0 and the last rating stays.

        Returns:
            True if the record changed.
        """
        if record is None:
            return False
        average, total = self.session.execute(
            select(func.avg(ReviewRecord.rating), func.count(ReviewRecord.id))
            .where(ReviewRecord.restaurant_id == record.id)
        ).one()
        if not total:
            if not reset_when_empty or record.review_count == 0:
                return False
            record.review_count = 0
            record.updated_at = now()
            return True
        average = float(average)
        if record.rating == average and record.review_count == total:
            return False
        record.rating = average
        record.review_count = total
        record.updated_at = now()
        logger.info(f"Restaurant {record.id} rating is now {average:.2f} over {total} reviews")
        return True

    def refresh_stats_for(self, restaurant_id: str, reset_when_empty: bool = False) -> bool:
        return self.refresh_stats(self.get_record(restaurant_id), reset_when_empty)

    # ── LIST MEMBERSHIP ───────────────────────────────────

    def _link_lists(self, record: RestaurantRecord) -> None:
        """
        Attach a newly stored restaurant to every list that already names it.

        A list can name a restaurant before it is stored, or keep its id after
        it was deleted; the membership relation only covers stored rows.
        """
        needle = json.dumps(record.id, ensure_ascii=False).encode("utf-8")
        stmt = select(UserListRecord).where(
            func.instr(UserListRecord.restaurant_ids_data, literal(needle, LargeBinary)) > 0
        )
        for user_list in self.session.scalars(stmt).all():
            if record.id not in decode_string_list(user_list.restaurant_ids_data):
                continue
            if record not in user_list.restaurants:
                user_list.restaurants.append(record)
                logger.info(f"Restaurant {record.id} linked to list {user_list.id}")

    # ── HOOKS ─────────────────────────────────────────────

    def _after_write(self, record: RestaurantRecord) -> None:
        if inspect(record).pending:
            self._link_lists(record)
        self.refresh_stats(record)

    def _before_delete(self, record: RestaurantRecord) -> None:
        # Reload both collections so the cascade sees every current review
        # and every list membership, not a copy from an earlier transaction.
        self.session.expire(record, ["reviews", "lists"])

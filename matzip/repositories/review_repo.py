"""
repositories/review_repo.py
---------------------------
Data access layer for reviews. Every write keeps the parent
restaurant's rating and review count in step.
"""

from matzip.db.records import ReviewRecord
from matzip.models import Review
from matzip.repositories.base_repo import BaseRepository
from matzip.repositories.mappers import apply_review, review_to_domain
from matzip.repositories.restaurant_repo import RestaurantRepository


class ReviewRepository(BaseRepository[Review]):
    """Repository for the reviews table; children of restaurants."""

    entity_name = "Review"
    to_domain = staticmethod(review_to_domain)
    apply = staticmethod(apply_review)

    def _children_filter(self, restaurant_id: str):
        return ReviewRecord.restaurant_id == restaurant_id

    def fetch_by_user(self, user_id: str) -> list[Review]:
        return self._fetch(ReviewRecord.user_id == user_id)

    def upsert(self, entity: Review) -> ReviewRecord:
        existing = self.get_record(entity.id)
        previous_parent = existing.restaurant_id if existing is not None else None
        record = super().upsert(entity)
        if previous_parent and previous_parent != record.restaurant_id:
            RestaurantRepository(self.session).refresh_stats_for(previous_parent, reset_when_empty=True)
        return record

    def _after_write(self, record: ReviewRecord) -> None:
        RestaurantRepository(self.session).refresh_stats_for(record.restaurant_id)

    def _after_delete(self, records: list) -> None:
        restaurants = RestaurantRepository(self.session)
        for restaurant_id in {r.restaurant_id for r in records}:
            restaurants.refresh_stats_for(restaurant_id, reset_when_empty=True)

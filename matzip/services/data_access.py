"""
services/data_access.py
-----------------------
The public entry point of the store for the presentation layer.

Construct one PersistenceStore at startup, wrap it in a DataAccessService
and pass that around:

    store = PersistenceStore()
    data = DataAccessService(store)
    await data.initialize_if_empty(sample_restaurants)
    restaurants = await data.restaurants.fetch_all()
"""

from typing import Callable, Iterable

from sqlalchemy.orm import Session

from matzip.db.connection import PersistenceStore
from matzip.models import Restaurant
from matzip.repositories.restaurant_repo import RestaurantRepository
from matzip.services.restaurant_service import RestaurantService
from matzip.services.review_service import ReviewService
from matzip.services.user_follow_service import UserFollowService
from matzip.services.user_list_service import UserListService
from matzip.utils.logger import get_logger

logger = get_logger(__name__)


class DataAccessService:
    """
    Groups the per-entity services around one store.

    Attributes:
        restaurants: RestaurantService
        reviews: ReviewService
        lists: UserListService
        follows: UserFollowService
    """

    def __init__(self, store: PersistenceStore):
        self.store = store
        self.restaurants = RestaurantService(store)
        self.reviews = ReviewService(store)
        self.lists = UserListService(store)
        self.follows = UserFollowService(store)
        self._seeding = False

    async def initialize_if_empty(self, seed: Callable[[], Iterable[Restaurant]]) -> bool:
        """
        Populate an empty store with seed restaurants, once.

        The emptiness check and the claim run as one step on the interactive
        context's queue, so a second caller arriving while seeding is in
        progress sees the claim and backs off.

        Args:
            seed: Called at most once, on a background context.

        Returns:
            True if the store was seeded, False if it already had data.

        Raises:
            CommitFailure: If the seed could not be committed.
        """
        def claim(session: Session) -> bool:
            if self._seeding or RestaurantRepository(session).count(limit=1) > 0:
                return False
            self._seeding = True
            return True

        if not await self.store.view_context.perform(claim):
            logger.info("Store already has data, skipping initialization")
            return False

        logger.info("Initializing store with seed data...")
        context = self.store.new_background_context()

        def populate(session: Session) -> int:
            repo = RestaurantRepository(session)
            restaurants = list(seed())
            for restaurant in restaurants:
                repo.upsert(restaurant)
            context.save()
            return len(restaurants)

        def release(_session: Session) -> None:
            self._seeding = False

        try:
            count = await context.perform(populate)
        finally:
            context.close()
            await self.store.view_context.perform(release)
        logger.info(f"Seed data migration completed ({count} restaurants)")
        return True

    async def wipe_all(self) -> dict[str, int]:
        """Delete every stored record. Development reset only."""
        return await self.store.wipe_all()

"""
services/entity_service.py
--------------------------
Generic asynchronous CRUD API shared by every entity service.

Each call is queued on the store's interactive context and awaited, so the
caller's thread is never blocked. Writes commit before returning. Failures
surface as ``StoreError`` subclasses raised from the awaited call; absence
is never an error.
"""

from typing import Any, Callable, Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from matzip.db.connection import PersistenceStore
from matzip.db.errors import CommitFailure
from matzip.repositories.base_repo import BaseRepository
from matzip.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class EntityService(Generic[T]):
    """
    fetch_all / fetch_by_id / fetch_children / upsert / delete for one entity.

    Args:
        store: The process-wide PersistenceStore.
    """

    repository_class: type[BaseRepository] = BaseRepository

    def __init__(self, store: PersistenceStore):
        self.store = store
        self.context = store.view_context

    async def _read(self, action: Callable[[BaseRepository], Any]) -> Any:
        def work(session: Session) -> Any:
            return action(self.repository_class(session))
        return await self.context.perform(work)

    async def _write(self, action: Callable[[BaseRepository], Any], map_back: bool = False) -> Any:
        """
        Run ``action`` and commit.

        With ``map_back`` the record returned by ``action`` is converted to a
        domain model after the commit, so callers see the stored values.
        """
        def work(session: Session) -> Any:
            repo = self.repository_class(session)
            try:
                result = action(repo)
                self.context.save()
            except SQLAlchemyError as e:
                # Constraint violations surface while flushing inside the action.
                session.rollback()
                logger.error(f"{repo.entity_name} write failed: {e}")
                raise CommitFailure(str(e)) from e
            if map_back and result is not None:
                return repo.to_domain(result)
            return result
        return await self.context.perform(work)

    # ── READ ──────────────────────────────────────────────

    async def fetch_all(self) -> list[T]:
        """Every record of the entity, in its default order."""
        return await self._read(lambda repo: repo.fetch_all())

    async def fetch_by_id(self, record_id: str) -> Optional[T]:
        """The entity with this id, or None."""
        return await self._read(lambda repo: repo.get_by_id(record_id))

    async def fetch_children(self, parent_id: str) -> list[T]:
        """Entities belonging to a parent id, in the default order."""
        return await self._read(lambda repo: repo.fetch_children(parent_id))

    # ── WRITE ─────────────────────────────────────────────

    async def upsert(self, entity: T) -> T:
        """
        Insert the entity, or update the stored one with the same id.

        Returns:
            The entity as stored, with store-assigned timestamps.

        Raises:
            CommitFailure: If the write could not be committed.
        """
        return await self._write(lambda repo: repo.upsert(entity), map_back=True)

    async def delete(self, record_id: str) -> None:
        """Delete the entity with this id. Unknown ids are a no-op."""
        await self._write(lambda repo: repo.delete(record_id))

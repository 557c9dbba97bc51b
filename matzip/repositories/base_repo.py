"""
repositories/base_repo.py
-------------------------
Shared query logic for every entity repository.

A repository wraps the session of the context it runs in. It never commits;
the calling service saves the context once the unit of work is complete.
"""

from typing import Any, Callable, Generic, Optional, TypeVar

from sqlalchemy import false, func, select
from sqlalchemy.orm import Session

from matzip.db.records import record_class
from matzip.db.schema import SCHEMA, Entity
from matzip.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    CRUD operations on the records of one entity.

    Subclasses set ``entity_name`` and the two mapper functions, and define
    ``_children_filter`` for per-parent queries.
    """

    entity_name: str = ""
    to_domain: Callable[[Any], T]
    apply: Callable[..., Any]

    def __init__(self, session: Session):
        self.session = session
        self.entity: Entity = SCHEMA.entity(self.entity_name)
        self.record_class = record_class(self.entity_name)

    def _order_by(self) -> list:
        clauses = []
        for name, ascending in self.entity.default_order:
            column = getattr(self.record_class, name)
            clauses.append(column.asc() if ascending else column.desc())
        return clauses

    def _select(self):
        return select(self.record_class).order_by(*self._order_by())

    def _fetch(self, *criteria) -> list[T]:
        records = self.session.scalars(self._select().where(*criteria)).all()
        return [self.to_domain(r) for r in records]

    # ── READ ──────────────────────────────────────────────

    def fetch_all(self) -> list[T]:
        """All records in the entity's default order."""
        return self._fetch()

    def get_record(self, record_id: str):
        """The record with this id, or None."""
        stmt = select(self.record_class).where(self.record_class.id == record_id).limit(1)
        return self.session.scalars(stmt).first()

    def get_by_id(self, record_id: str) -> Optional[T]:
        record = self.get_record(record_id)
        return self.to_domain(record) if record is not None else None

    def fetch_children(self, parent_id: str) -> list[T]:
        """Records belonging to a parent, in the default order."""
        return self._fetch(self._children_filter(parent_id))

    def _children_filter(self, parent_id: str):
        # No parent relationship: nothing matches.
        return false()

    def count(self, limit: Optional[int] = None) -> int:
        """
        Count records, optionally stopping after ``limit`` rows.

        A limit of 1 is enough to answer "is the store empty".
        """
        inner = select(self.record_class.id)
        if limit is not None:
            inner = inner.limit(limit)
        return self.session.scalar(select(func.count()).select_from(inner.subquery()))

    # ── WRITE ─────────────────────────────────────────────

    def upsert(self, entity: T):
        """
        Update the record with the entity's id, or insert a new one.

        Returns:
            The written record (flushed on the next query or commit).
        """
        record = self.get_record(entity.id)
        if record is not None:
            self.apply(record, entity, created=False)
            logger.info(f"Updated {self.entity_name} {entity.id}")
        else:
            record = self.apply(self.record_class(), entity, created=True)
            self.session.add(record)
            logger.info(f"Inserted {self.entity_name} {entity.id}")
        self._after_write(record)
        return record

    def delete(self, record_id: str) -> int:
        """
        Delete every record carrying this id (there should be at most one).

        Returns:
            Number of records deleted; 0 when none matched.
        """
        stmt = select(self.record_class).where(self.record_class.id == record_id)
        records = self.session.scalars(stmt).all()
        for record in records:
            self._before_delete(record)
            self.session.delete(record)
        if records:
            logger.info(f"Deleted {self.entity_name} {record_id}")
        self._after_delete(records)
        return len(records)

    # ── HOOKS ─────────────────────────────────────────────

    def _after_write(self, record) -> None:
        pass

    def _before_delete(self, record) -> None:
        pass

    def _after_delete(self, records: list) -> None:
        pass

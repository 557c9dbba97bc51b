"""
db/context.py
-------------
Store contexts: a SQLAlchemy session bound to its own serial worker.

All work against a context is submitted to its single-thread executor, so
operations on the same context run in submission order while different
contexts interleave freely. Callers await the returned futures and are never
blocked.

Committed changes are reported to commit listeners. The store uses this to
merge background commits into the interactive context: records that the
interactive context has modified locally keep those property values, every
other property is reloaded from the database on next access.
"""

import asyncio
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy import event, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from matzip.db.errors import CommitFailure, StoreError
from matzip.utils.logger import get_logger

logger = get_logger(__name__)

# (record class, id)
Identity = tuple[type, str]


@dataclass
class ChangeSet:
    """Identities touched by the flushes of one transaction."""
    inserted: set = field(default_factory=set)
    updated: set = field(default_factory=set)
    deleted: set = field(default_factory=set)
    bulk: set = field(default_factory=set)  # record classes hit by bulk deletes

    def __bool__(self) -> bool:
        return bool(self.inserted or self.updated or self.deleted or self.bulk)


def _identity(obj) -> Identity:
    state = inspect(obj)
    if state.identity is not None:
        return type(obj), state.identity[0]
    return type(obj), obj.id


class StoreContext:
    """
    A unit-of-work scope against the store.

    Args:
        name: Label used in logs and worker thread names.
        session_factory: Callable returning a new Session.
    """

    def __init__(self, name: str, session_factory: Callable[[], Session]):
        self.name = name
        self.session: Session = session_factory()
        self.session.info["context"] = name
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"matzip-{name}")
        self._pending = ChangeSet()
        self._commit_listeners: list[Callable[[ChangeSet], Any]] = []
        self._closed = False

        event.listen(self.session, "after_flush", self._record_flush)
        event.listen(self.session, "after_commit", self._dispatch_commit)
        event.listen(self.session, "after_rollback", self._discard_changes)

    # ── Scheduling ────────────────────────────────────────

    def submit(self, fn: Callable[..., Any], *args) -> Future:
        """
        Queue ``fn(session, *args)`` on this context's worker.

        Returns:
            A concurrent.futures.Future resolved with fn's result.
        """
        if self._closed:
            raise StoreError(f"Context '{self.name}' is closed.")
        return self._executor.submit(self._run, fn, *args)

    async def perform(self, fn: Callable[..., Any], *args) -> Any:
        """Run ``fn(session, *args)`` on the worker and await its result."""
        return await asyncio.wrap_future(self.submit(fn, *args))

    def _run(self, fn: Callable[..., Any], *args) -> Any:
        try:
            return fn(self.session, *args)
        except StoreError:
            raise
        except SQLAlchemyError as e:
            writing = self.has_changes
            self.session.rollback()
            logger.error(f"[{self.name}] Unit of work failed: {e}")
            if writing:
                raise CommitFailure(str(e)) from e
            raise StoreError(str(e)) from e
        except Exception:
            if self.has_changes:
                self.session.rollback()
            raise

    # ── Change tracking ───────────────────────────────────

    @property
    def has_changes(self) -> bool:
        """True if there is anything uncommitted, flushed or not."""
        session = self.session
        if session.new or session.deleted or self._pending:
            return True
        return any(session.is_modified(obj) for obj in session.dirty)

    def note_bulk_change(self, record_class: type) -> None:
        """Register a bulk statement that bypassed the unit of work."""
        self._pending.bulk.add(record_class)

    def add_commit_listener(self, listener: Callable[[ChangeSet], Any]) -> None:
        self._commit_listeners.append(listener)

    def _record_flush(self, session: Session, flush_context) -> None:
        for obj in session.new:
            self._pending.inserted.add(_identity(obj))
        for obj in session.dirty:
            if session.is_modified(obj):
                self._pending.updated.add(_identity(obj))
        for obj in session.deleted:
            self._pending.deleted.add(_identity(obj))

    def _dispatch_commit(self, session: Session) -> None:
        changes, self._pending = self._pending, ChangeSet()
        if not changes:
            return
        for listener in self._commit_listeners:
            listener(changes)

    def _discard_changes(self, session: Session) -> None:
        self._pending = ChangeSet()

    # ── Save ──────────────────────────────────────────────

    def save(self) -> bool:
        """
        Commit pending changes. Must be called from this context's worker.

        Returns:
            False if there was nothing to commit, True after a commit.

        Raises:
            CommitFailure: If the commit failed. The transaction is rolled back.
        """
        if not self.has_changes:
            return False
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[{self.name}] Commit failed: {e}")
            raise CommitFailure(str(e)) from e
        logger.debug(f"[{self.name}] Context saved successfully.")
        return True

    # ── Merge ─────────────────────────────────────────────

    def merge_changes(self, changes: ChangeSet) -> Future:
        """Queue a merge of another context's committed changes."""
        return self.submit(self._merge, changes)

    def _merge(self, session: Session, changes: ChangeSet) -> None:
        gone = [
            session.identity_map.get(Session.identity_key(cls, ident))
            for cls, ident in changes.deleted
        ]
        gone.extend(
            obj for obj in list(session.identity_map.values())
            if type(obj) in changes.bulk
        )
        for obj in gone:
            if obj is not None and obj in session:
                session.expunge(obj)

        touched = [
            session.identity_map.get(Session.identity_key(cls, ident))
            for cls, ident in changes.inserted | changes.updated
        ]
        for obj in touched:
            if obj is not None:
                self._refresh_unmodified(session, obj)

        logger.debug(
            f"[{self.name}] Merged {len(changes.inserted)} inserted, "
            f"{len(changes.updated)} updated, {len(changes.deleted)} deleted."
        )

    @staticmethod
    def _refresh_unmodified(session: Session, obj) -> None:
        """Expire every property of obj except the ones changed locally."""
        state = inspect(obj)
        local = {attr.key for attr in state.attrs if attr.history.has_changes()}
        local.update(state.mapper.get_property_by_column(col).key for col in state.mapper.primary_key)
        stale = [key for key in state.mapper.attrs.keys() if key not in local]
        if stale:
            session.expire(obj, stale)

    # ── Teardown ──────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self, wait: bool = False) -> None:
        """Close the session after queued work finishes and stop the worker."""
        if self._closed:
            return
        self._executor.submit(self.session.close)
        self._closed = True
        self._executor.shutdown(wait=wait)
        logger.debug(f"[{self.name}] Context closed.")

    def __repr__(self) -> str:
        return f"<StoreContext {self.name}>"


"""
db/connection.py
----------------
Owns the on-disk SQLite database and hands out store contexts.

One PersistenceStore is constructed at startup and passed to the services.
It exposes a long-lived interactive context (``view_context``) and a factory
for short-lived background contexts. Background commits are merged into the
interactive context automatically.

Open failures follow the build mode:
    debug   - destroy the store file, recreate it, retry once.
    release - terminate immediately.
Either way, a store that cannot be opened ends the process.
"""

import itertools
from pathlib import Path
from typing import Optional, Union

from sqlalchemy import create_engine, delete, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from matzip.config import BUSY_TIMEOUT_SECONDS, DB_PATH, DEBUG, SQL_ECHO
from matzip.db.context import StoreContext
from matzip.db.errors import StoreUnavailable
from matzip.db.init_db import create_tables
from matzip.db.records import record_class
from matzip.db.schema import SCHEMA
from matzip.utils.logger import get_logger

logger = get_logger(__name__)

_STORE_FILE_SUFFIXES = ("", "-wal", "-shm", "-journal")


def _enable_foreign_keys(dbapi_conn, _connection_record) -> None:
    """SQLite ignores ON DELETE rules unless this pragma is set per connection."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class PersistenceStore:
    """
    The single owner of the database file.

    Args:
        path: Database file location (default: ``MATZIP_DB_PATH``).
        debug: Build-mode flag selecting the open failure policy
            (default: ``MATZIP_BUILD_MODE``).

    Raises:
        SystemExit: If the store cannot be opened (after one reset in debug mode).
    """

    def __init__(self, path: Union[str, Path, None] = None, debug: Optional[bool] = None):
        self.path = Path(path if path is not None else DB_PATH)
        self.debug = DEBUG if debug is None else debug
        self.engine: Engine = self._load_store()
        self._session_factory = sessionmaker(bind=self.engine, class_=Session)
        self._counter = itertools.count(1)
        self._background: list[StoreContext] = []
        self.view_context = StoreContext("view", self._session_factory)
        logger.info(f"Store opened at {self.path} ({'debug' if self.debug else 'release'} mode).")

    # ── Opening ───────────────────────────────────────────

    def _open(self) -> Engine:
        """
        Create the engine and make sure the schema is in place.

        Raises:
            StoreUnavailable: If the file cannot be opened, is not a database,
                or was written with an incompatible schema.
        """
        engine = create_engine(
            f"sqlite:///{self.path}",
            echo=SQL_ECHO,
            connect_args={"timeout": BUSY_TIMEOUT_SECONDS, "check_same_thread": False},
        )
        event.listen(engine, "connect", _enable_foreign_keys)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with engine.begin() as conn:
                create_tables(conn)
        except StoreUnavailable:
            engine.dispose()
            raise
        except (SQLAlchemyError, OSError) as e:
            engine.dispose()
            raise StoreUnavailable(f"Could not open store at {self.path}: {e}") from e
        return engine

    def _load_store(self) -> Engine:
        try:
            return self._open()
        except StoreUnavailable as e:
            logger.critical(f"Store error: {e}")
            if not self.debug:
                raise SystemExit(f"Unresolved store error: {e}") from e

        # Debug builds change the schema often; start over with an empty store.
        try:
            self._destroy_store_files()
            engine = self._open()
        except StoreUnavailable as e:
            logger.critical(f"Failed to recreate store: {e}")
            raise SystemExit(f"Failed to recreate store: {e}") from e
        logger.warning(f"Store at {self.path} was reset and recreated.")
        return engine

    def _destroy_store_files(self) -> None:
        for suffix in _STORE_FILE_SUFFIXES:
            target = self.path.with_name(self.path.name + suffix)
            try:
                target.unlink(missing_ok=True)
            except OSError as e:
                raise StoreUnavailable(f"Could not remove {target}: {e}") from e

    # ── Contexts ──────────────────────────────────────────

    def new_background_context(self) -> StoreContext:
        """
        Create a short-lived context for bulk work.

        Its commits are merged into ``view_context``. Call ``close()`` on it
        when done.
        """
        self._background = [c for c in self._background if not c.closed]
        context = StoreContext(f"background-{next(self._counter)}", self._session_factory)
        context.add_commit_listener(self.view_context.merge_changes)
        self._background.append(context)
        return context

    async def save(self, context: StoreContext) -> bool:
        """
        Commit a context's pending changes on its own queue.

        Returns:
            False if there was nothing to save.

        Raises:
            CommitFailure: If the commit failed.
        """
        return await context.perform(lambda _session: context.save())

    # ── Development helpers ───────────────────────────────

    async def wipe_all(self) -> dict[str, int]:
        """
        Batch-delete every entity, children first, then commit.
        Development reset only.

        Returns:
            Deleted row count per entity name, in deletion order.
        """
        context = self.view_context

        def work(session: Session) -> dict[str, int]:
            deleted = {}
            for entity_name in reversed(SCHEMA.entity_names()):
                cls = record_class(entity_name)
                result = session.execute(delete(cls))
                context.note_bulk_change(cls)
                deleted[entity_name] = result.rowcount
                logger.info(f"Deleted all data from {entity_name} ({result.rowcount} rows).")
            context.save()
            return deleted

        return await context.perform(work)

    # ── Teardown ──────────────────────────────────────────

    def close(self) -> None:
        """Finish queued work, close every context and release the file."""
        for context in self._background:
            context.close(wait=True)
        self._background.clear()
        self.view_context.close(wait=True)
        self.engine.dispose()
        logger.info(f"Store at {self.path} closed.")

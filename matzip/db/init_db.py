"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist,
after checking that an existing file matches the declared schema.
Run this module directly to initialize a fresh database file:
    python -m matzip.db.init_db
"""

from sqlalchemy import inspect
from sqlalchemy.engine import Connection

from matzip.db.errors import StoreUnavailable
from matzip.db.schema import METADATA
from matzip.utils.logger import get_logger

logger = get_logger(__name__)


def verify_schema(conn: Connection) -> None:
    """
    Compare existing tables against the declared schema.

    Tables that do not exist yet are fine (they will be created).
    A table missing one of the declared columns means the file was
    written by an incompatible schema.

    Raises:
        StoreUnavailable: On any missing column.
    """
    inspector = inspect(conn)
    existing = set(inspector.get_table_names())
    for table in METADATA.sorted_tables:
        if table.name not in existing:
            continue
        stored = {col["name"] for col in inspector.get_columns(table.name)}
        missing = set(table.columns.keys()) - stored
        if missing:
            raise StoreUnavailable(
                f"Schema mismatch in table '{table.name}': missing {sorted(missing)}"
            )


def create_tables(conn: Connection) -> None:
    """
    Create all tables and indexes.
    Safe to call multiple times (existing tables are left alone).
    """
    verify_schema(conn)
    METADATA.create_all(conn)
    logger.info("Database schema initialized successfully.")


if __name__ == "__main__":
    from matzip.db.connection import PersistenceStore
    store = PersistenceStore()
    print(f"Store ready at {store.path}")
    store.close()

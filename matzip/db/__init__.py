"""
db/ - Database Layer
====================
Owns the SQLite store file: schema descriptors, mapped record classes,
store contexts and the open/reset policy.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""

from matzip.db.connection import PersistenceStore
from matzip.db.context import ChangeSet, StoreContext
from matzip.db.errors import CommitFailure, StoreError, StoreUnavailable

__all__ = [
    "ChangeSet",
    "CommitFailure",
    "PersistenceStore",
    "StoreContext",
    "StoreError",
    "StoreUnavailable",
]

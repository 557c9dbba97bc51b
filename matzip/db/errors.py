"""
db/errors.py
------------
Error taxonomy of the persistence layer.

Absence of a record is never an error (lookups return None or an empty list),
and a corrupt embedded list silently decodes to an empty list.
"""


class StoreError(Exception):
    """Base class for every failure raised by the store."""


class StoreUnavailable(StoreError):
    """The database file could not be opened or recreated."""


class CommitFailure(StoreError):
    """A write transaction could not be committed. Never retried."""

"""
db/records.py
-------------
Persisted record classes, mapped imperatively from the schema descriptors.

Records are mutable rows owned by a store context. Nothing outside the
repositories should touch them; callers only ever see domain models.
"""

from sqlalchemy.orm import registry, relationship

from matzip.db.schema import METADATA, SCHEMA, DeleteRule, Relationship

mapper_registry = registry(metadata=METADATA)


class RestaurantRecord:
    """Row of the ``restaurants`` table."""

    def __repr__(self) -> str:
        return f"<RestaurantRecord {self.id}>"


class ReviewRecord:
    """Row of the ``reviews`` table."""

    def __repr__(self) -> str:
        return f"<ReviewRecord {self.id} restaurant={self.restaurant_id}>"


class UserListRecord:
    """Row of the ``user_lists`` table."""

    def __repr__(self) -> str:
        return f"<UserListRecord {self.id} user={self.user_id}>"


class UserFollowRecord:
    """Row of the ``user_follows`` table."""

    def __repr__(self) -> str:
        return f"<UserFollowRecord {self.follower_id}->{self.following_id}>"


RECORD_CLASSES: dict[str, type] = {
    "Restaurant": RestaurantRecord,
    "Review": ReviewRecord,
    "UserList": UserListRecord,
    "UserFollow": UserFollowRecord,
}


def _relationship_property(rel: Relationship):
    """Build the ORM relationship for one descriptor side."""
    kwargs = {"back_populates": rel.inverse}
    if rel.secondary is not None:
        kwargs["secondary"] = METADATA.tables[rel.secondary]
    if not rel.to_many:
        kwargs["uselist"] = False
    if rel.delete_rule is DeleteRule.CASCADE:
        kwargs["cascade"] = "all"
    return relationship(RECORD_CLASSES[rel.destination], **kwargs)


def _map_records() -> None:
    for entity in SCHEMA.entities:
        properties = {
            rel.name: _relationship_property(rel)
            for rel in SCHEMA.relationships_for(entity.name)
        }
        mapper_registry.map_imperatively(
            RECORD_CLASSES[entity.name],
            METADATA.tables[entity.table],
            properties=properties,
        )


_map_records()


def record_class(entity_name: str) -> type:
    """Return the mapped record class for an entity name."""
    return RECORD_CLASSES[entity_name]

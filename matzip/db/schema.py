"""
db/schema.py
------------
Declarative description of every stored entity.

The schema is a table of plain descriptors (entities, typed attributes and
relationships with delete rules). It is built once at import time and turned
into SQLAlchemy ``MetaData`` by ``Schema.build_metadata()``; the record classes
in ``db/records.py`` are mapped from the same descriptors.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    LargeBinary,
    MetaData,
    SmallInteger,
    String,
    Table,
)


class FieldType(Enum):
    STRING = "string"
    DOUBLE = "double"
    INTEGER_32 = "integer32"
    INTEGER_16 = "integer16"
    BOOLEAN = "boolean"
    DATE = "date"
    BINARY = "binary"


class DeleteRule(Enum):
    """What happens to the destination when the source record is deleted."""
    CASCADE = "cascade"
    NULLIFY = "nullify"


_COLUMN_TYPES = {
    FieldType.STRING: String,
    FieldType.DOUBLE: Float,
    FieldType.INTEGER_32: Integer,
    FieldType.INTEGER_16: SmallInteger,
    FieldType.BOOLEAN: Boolean,
    FieldType.DATE: DateTime,
    FieldType.BINARY: LargeBinary,
}

# Required numeric/boolean attributes fall back to these.
_TYPE_DEFAULTS = {
    FieldType.DOUBLE: 0.0,
    FieldType.INTEGER_32: 0,
    FieldType.INTEGER_16: 0,
    FieldType.BOOLEAN: False,
}


@dataclass(frozen=True)
class Attribute:
    """
    One typed column of an entity.

    Attributes:
        name: Column name.
        type: Storage type.
        optional: Whether NULL is allowed.
        default: Value used when none is given.
        allows_external_storage: Hint that large binary values may live
            outside the row. SQLite keeps them inline.
        indexed: Whether to create an index on the column.
    """
    name: str
    type: FieldType
    optional: bool = True
    default: Any = None
    allows_external_storage: bool = False
    indexed: bool = False

    def to_column(self, primary_key: bool = False, *constraints) -> Column:
        return Column(
            self.name,
            _COLUMN_TYPES[self.type],
            *constraints,
            primary_key=primary_key,
            nullable=self.optional and not primary_key,
            default=self.default,
            index=self.indexed,
        )


@dataclass(frozen=True)
class Relationship:
    """
    One side of a relationship between two entities.

    ``max_count`` of 0 means unbounded. A to-one side names the column holding
    the destination id in ``foreign_key``; a many-to-many pair shares a
    ``secondary`` association table.
    """
    name: str
    source: str
    destination: str
    inverse: str
    to_many: bool
    delete_rule: DeleteRule
    optional: bool = True
    min_count: int = 0
    max_count: int = 0
    foreign_key: Optional[str] = None
    secondary: Optional[str] = None


@dataclass(frozen=True)
class Entity:
    """
    A stored entity: its table, attributes and default fetch order.

    ``default_order`` is a sequence of ``(attribute, ascending)`` pairs.
    Every entity is keyed by a string ``id`` column.
    """
    name: str
    table: str
    attributes: tuple[Attribute, ...]
    default_order: tuple[tuple[str, bool], ...]

    def attribute(self, name: str) -> Attribute:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        raise KeyError(f"{self.name} has no attribute {name!r}")

    @property
    def column_names(self) -> list[str]:
        return [attr.name for attr in self.attributes]


@dataclass(frozen=True)
class Schema:
    entities: tuple[Entity, ...]
    relationships: tuple[Relationship, ...]

    def entity(self, name: str) -> Entity:
        for entity in self.entities:
            if entity.name == name:
                return entity
        raise KeyError(f"Unknown entity {name!r}")

    def entity_names(self) -> list[str]:
        return [entity.name for entity in self.entities]

    def relationships_for(self, entity_name: str) -> list[Relationship]:
        return [rel for rel in self.relationships if rel.source == entity_name]

    def relationship(self, entity_name: str, name: str) -> Relationship:
        for rel in self.relationships_for(entity_name):
            if rel.name == name:
                return rel
        raise KeyError(f"{entity_name} has no relationship {name!r}")

    def build_metadata(self) -> MetaData:
        """
        Translate the descriptors into SQLAlchemy tables.

        Foreign keys follow the delete rules: a to-one side whose inverse
        cascades gets ``ON DELETE CASCADE``, otherwise ``SET NULL``.
        Association rows of many-to-many pairs are always removed with either
        end, which nullifies the membership without touching the other record.
        """
        metadata = MetaData()
        foreign_keys: dict[tuple[str, str], ForeignKey] = {}

        for rel in self.relationships:
            if rel.to_many or rel.foreign_key is None:
                continue
            inverse = self.relationship(rel.destination, rel.inverse)
            ondelete = "CASCADE" if inverse.delete_rule is DeleteRule.CASCADE else "SET NULL"
            target = self.entity(rel.destination).table
            foreign_keys[(rel.source, rel.foreign_key)] = ForeignKey(f"{target}.id", ondelete=ondelete)

        for entity in self.entities:
            columns = []
            for attr in entity.attributes:
                fk = foreign_keys.get((entity.name, attr.name))
                constraints = (fk,) if fk is not None else ()
                columns.append(attr.to_column(attr.name == "id", *constraints))
            Table(entity.table, metadata, *columns)

        created: set[str] = set()
        for rel in self.relationships:
            if rel.secondary is None or rel.secondary in created:
                continue
            left = self.entity(rel.source)
            right = self.entity(rel.destination)
            Table(
                rel.secondary,
                metadata,
                Column(f"{_singular(left.table)}_id", String,
                       ForeignKey(f"{left.table}.id", ondelete="CASCADE"), primary_key=True),
                Column(f"{_singular(right.table)}_id", String,
                       ForeignKey(f"{right.table}.id", ondelete="CASCADE"), primary_key=True),
            )
            created.add(rel.secondary)

        return metadata


def _singular(table: str) -> str:
    return table[:-1] if table.endswith("s") else table


# ── Attribute helpers ─────────────────────────────────────

def string_attr(name: str, optional: bool = True, indexed: bool = False) -> Attribute:
    return Attribute(name, FieldType.STRING, optional=optional, indexed=indexed)


def double_attr(name: str, optional: bool = False) -> Attribute:
    return Attribute(name, FieldType.DOUBLE, optional=optional, default=_TYPE_DEFAULTS[FieldType.DOUBLE])


def int32_attr(name: str, optional: bool = False) -> Attribute:
    return Attribute(name, FieldType.INTEGER_32, optional=optional, default=_TYPE_DEFAULTS[FieldType.INTEGER_32])


def int16_attr(name: str, optional: bool = False) -> Attribute:
    return Attribute(name, FieldType.INTEGER_16, optional=optional, default=_TYPE_DEFAULTS[FieldType.INTEGER_16])


def bool_attr(name: str, optional: bool = False) -> Attribute:
    return Attribute(name, FieldType.BOOLEAN, optional=optional, default=_TYPE_DEFAULTS[FieldType.BOOLEAN])


def date_attr(name: str, optional: bool = True) -> Attribute:
    return Attribute(name, FieldType.DATE, optional=optional)


def binary_attr(name: str, optional: bool = True) -> Attribute:
    return Attribute(name, FieldType.BINARY, optional=optional, allows_external_storage=True)


# ── Entities ──────────────────────────────────────────────

RESTAURANT = Entity(
    name="Restaurant",
    table="restaurants",
    attributes=(
        string_attr("id", optional=False),
        string_attr("name", optional=False),
        string_attr("category_raw_value", optional=False),
        string_attr("address", optional=False),
        double_attr("latitude"),
        double_attr("longitude"),
        string_attr("phone_number"),
        double_attr("rating"),
        int32_attr("review_count"),
        int16_attr("price_range_raw_value"),
        string_attr("restaurant_description"),
        binary_attr("image_urls_data"),
        bool_attr("is_favorite"),
        date_attr("created_at"),
        date_attr("updated_at"),
    ),
    default_order=(("name", True),),
)

REVIEW = Entity(
    name="Review",
    table="reviews",
    attributes=(
        string_attr("id", optional=False),
        string_attr("restaurant_id", optional=False, indexed=True),
        string_attr("user_id", optional=False, indexed=True),
        string_attr("user_name", optional=False),
        string_attr("user_profile_image_url"),
        double_attr("rating"),
        string_attr("comment"),
        binary_attr("image_urls_data"),
        date_attr("visit_date"),
        date_attr("created_at", optional=False),
        date_attr("updated_at"),
    ),
    default_order=(("created_at", False),),
)

USER_LIST = Entity(
    name="UserList",
    table="user_lists",
    attributes=(
        string_attr("id", optional=False),
        string_attr("user_id", optional=False, indexed=True),
        string_attr("name", optional=False),
        string_attr("list_description"),
        binary_attr("restaurant_ids_data"),
        bool_attr("is_public"),
        date_attr("created_at", optional=False),
        date_attr("updated_at"),
    ),
    default_order=(("created_at", False),),
)

USER_FOLLOW = Entity(
    name="UserFollow",
    table="user_follows",
    attributes=(
        string_attr("id", optional=False),
        string_attr("follower_id", optional=False, indexed=True),
        string_attr("following_id", optional=False, indexed=True),
        date_attr("created_at", optional=False),
        date_attr("updated_at"),
    ),
    default_order=(("created_at", False),),
)


# ── Relationships ─────────────────────────────────────────

RELATIONSHIPS = (
    # Restaurant (1) <-> Review (N)
    Relationship(
        name="reviews", source="Restaurant", destination="Review", inverse="restaurant",
        to_many=True, delete_rule=DeleteRule.CASCADE,
    ),
    Relationship(
        name="restaurant", source="Review", destination="Restaurant", inverse="reviews",
        to_many=False, max_count=1, delete_rule=DeleteRule.NULLIFY, foreign_key="restaurant_id",
    ),
    # Restaurant (N) <-> UserList (N)
    Relationship(
        name="lists", source="Restaurant", destination="UserList", inverse="restaurants",
        to_many=True, delete_rule=DeleteRule.NULLIFY, secondary="list_restaurants",
    ),
    Relationship(
        name="restaurants", source="UserList", destination="Restaurant", inverse="lists",
        to_many=True, delete_rule=DeleteRule.NULLIFY, secondary="list_restaurants",
    ),
)

SCHEMA = Schema(
    entities=(RESTAURANT, REVIEW, USER_LIST, USER_FOLLOW),
    relationships=RELATIONSHIPS,
)

METADATA = SCHEMA.build_metadata()

from __future__ import annotations

import pytest
from sqlalchemy import Boolean, DateTime, Float, Integer, LargeBinary, SmallInteger, String

from matzip.db.records import RECORD_CLASSES, record_class
from matzip.db.schema import METADATA, SCHEMA, DeleteRule, FieldType


def test_entities_in_declaration_order():
    assert SCHEMA.entity_names() == ["Restaurant", "Review", "UserList", "UserFollow"]


def test_every_entity_has_a_record_class():
    for name in SCHEMA.entity_names():
        assert record_class(name) is RECORD_CLASSES[name]


def test_tables_include_association_table():
    assert set(METADATA.tables) == {
        "restaurants", "reviews", "user_lists", "user_follows", "list_restaurants",
    }


def test_column_types_follow_field_types():
    restaurants = METADATA.tables["restaurants"]
    assert isinstance(restaurants.c.name.type, String)
    assert isinstance(restaurants.c.rating.type, Float)
    assert isinstance(restaurants.c.review_count.type, Integer)
    assert isinstance(restaurants.c.price_range_raw_value.type, SmallInteger)
    assert isinstance(restaurants.c.is_favorite.type, Boolean)
    assert isinstance(restaurants.c.created_at.type, DateTime)
    assert isinstance(restaurants.c.image_urls_data.type, LargeBinary)


def test_required_numeric_and_boolean_fields_have_defaults():
    restaurant = SCHEMA.entity("Restaurant")
    assert restaurant.attribute("rating").default == 0.0
    assert restaurant.attribute("review_count").default == 0
    assert restaurant.attribute("price_range_raw_value").default == 0
    assert restaurant.attribute("is_favorite").default is False
    assert restaurant.attribute("rating").optional is False


def test_optional_flags():
    review = SCHEMA.entity("Review")
    assert review.attribute("user_profile_image_url").optional is True
    assert review.attribute("created_at").optional is False
    assert METADATA.tables["reviews"].c.created_at.nullable is False
    assert METADATA.tables["restaurants"].c.phone_number.nullable is True


def test_binary_fields_allow_external_storage():
    attr = SCHEMA.entity("UserList").attribute("restaurant_ids_data")
    assert attr.type is FieldType.BINARY
    assert attr.allows_external_storage is True


def test_restaurant_review_relationship_rules():
    reviews = SCHEMA.relationship("Restaurant", "reviews")
    restaurant = SCHEMA.relationship("Review", "restaurant")
    assert reviews.to_many and reviews.max_count == 0
    assert reviews.delete_rule is DeleteRule.CASCADE
    assert not restaurant.to_many and restaurant.max_count == 1
    assert restaurant.delete_rule is DeleteRule.NULLIFY
    assert reviews.inverse == "restaurant" and restaurant.inverse == "reviews"


def test_review_foreign_key_cascades():
    fk = next(iter(METADATA.tables["reviews"].c.restaurant_id.foreign_keys))
    assert fk.target_fullname == "restaurants.id"
    assert fk.ondelete == "CASCADE"


def test_list_membership_is_nullified_both_ways():
    lists = SCHEMA.relationship("Restaurant", "lists")
    restaurants = SCHEMA.relationship("UserList", "restaurants")
    assert lists.delete_rule is DeleteRule.NULLIFY
    assert restaurants.delete_rule is DeleteRule.NULLIFY
    link = METADATA.tables["list_restaurants"]
    assert set(link.c.keys()) == {"restaurant_id", "user_list_id"}
    for column in link.c:
        (fk,) = column.foreign_keys
        assert fk.ondelete == "CASCADE"


def test_default_orders():
    assert SCHEMA.entity("Restaurant").default_order == (("name", True),)
    for name in ("Review", "UserList", "UserFollow"):
        assert SCHEMA.entity(name).default_order == (("created_at", False),)


def test_unknown_lookups_raise_key_error():
    with pytest.raises(KeyError):
        SCHEMA.entity("User")
    with pytest.raises(KeyError):
        SCHEMA.relationship("Review", "lists")
    with pytest.raises(KeyError):
        SCHEMA.entity("Restaurant").attribute("menu")

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import create_engine, inspect, text

from matzip.db import CommitFailure, PersistenceStore, StoreError
from matzip.repositories import RestaurantRepository
from tests.factories import make_restaurant, make_review


def test_open_creates_every_table(store):
    tables = set(inspect(store.engine).get_table_names())
    assert {"restaurants", "reviews", "user_lists", "user_follows", "list_restaurants"} <= tables


def test_reopen_keeps_data(db_path, data, store):
    asyncio.run(data.restaurants.upsert(make_restaurant()))
    store.close()

    reopened = PersistenceStore(db_path, debug=True)
    try:
        names = asyncio.run(reopened.view_context.perform(
            lambda session: [r.name for r in RestaurantRepository(session).fetch_all()]
        ))
    finally:
        reopened.close()
    assert names == ["명동교자"]


def test_corrupt_file_is_reset_in_debug_mode(db_path):
    db_path.write_bytes(b"this is not a sqlite database" * 100)

    store = PersistenceStore(db_path, debug=True)
    try:
        assert "restaurants" in inspect(store.engine).get_table_names()
    finally:
        store.close()


def test_corrupt_file_exits_in_release_mode(db_path):
    db_path.write_bytes(b"this is not a sqlite database" * 100)

    with pytest.raises(SystemExit):
        PersistenceStore(db_path, debug=False)
    # Release mode never touches the file.
    assert db_path.read_bytes().startswith(b"this is not")


def test_unrecoverable_path_exits_in_debug_mode(tmp_path):
    blocked = tmp_path / "store.sqlite3"
    blocked.mkdir()

    with pytest.raises(SystemExit):
        PersistenceStore(blocked, debug=True)


def test_schema_mismatch_is_reset_in_debug_mode(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE restaurants (id VARCHAR PRIMARY KEY)"))
        conn.execute(text("INSERT INTO restaurants (id) VALUES ('old')"))
    engine.dispose()

    store = PersistenceStore(db_path, debug=True)
    try:
        columns = {c["name"] for c in inspect(store.engine).get_columns("restaurants")}
        assert "category_raw_value" in columns
        count = asyncio.run(store.view_context.perform(
            lambda session: RestaurantRepository(session).count()
        ))
        assert count == 0
    finally:
        store.close()


def test_schema_mismatch_exits_in_release_mode(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE reviews (id VARCHAR PRIMARY KEY)"))
    engine.dispose()

    with pytest.raises(SystemExit):
        PersistenceStore(db_path, debug=False)


def test_save_without_changes_is_a_no_op(store):
    assert asyncio.run(store.save(store.view_context)) is False


def test_save_commits_pending_changes(store):
    def add(session):
        RestaurantRepository(session).upsert(make_restaurant())

    asyncio.run(store.view_context.perform(add))
    assert asyncio.run(store.save(store.view_context)) is True
    assert asyncio.run(store.save(store.view_context)) is False


def test_review_for_missing_restaurant_fails_to_commit(data):
    with pytest.raises(CommitFailure):
        asyncio.run(data.reviews.upsert(make_review("v1", restaurant_id="ghost")))

    # The failed write leaves nothing behind and the context stays usable.
    assert asyncio.run(data.reviews.fetch_all()) == []
    asyncio.run(data.restaurants.upsert(make_restaurant()))
    assert len(asyncio.run(data.restaurants.fetch_all())) == 1


def test_closed_context_rejects_work(store):
    context = store.new_background_context()
    context.close(wait=True)
    assert context.closed
    with pytest.raises(StoreError):
        context.submit(lambda session: None)


def test_background_commit_merges_into_view(data, store):
    asyncio.run(data.restaurants.upsert(make_restaurant(name="Old")))
    assert asyncio.run(data.restaurants.fetch_by_id("r1")).name == "Old"

    background = store.new_background_context()

    def rename(session):
        RestaurantRepository(session).get_record("r1").name = "New"
        background.save()

    try:
        asyncio.run(background.perform(rename))
    finally:
        background.close()

    assert asyncio.run(data.restaurants.fetch_by_id("r1")).name == "New"


def test_merge_keeps_local_changes_of_the_view(data, store):
    asyncio.run(data.restaurants.upsert(make_restaurant(name="Old")))
    view = store.view_context

    def mark_favorite(session):
        RestaurantRepository(session).get_record("r1").is_favorite = True

    asyncio.run(view.perform(mark_favorite))

    background = store.new_background_context()

    def rename(session):
        RestaurantRepository(session).get_record("r1").name = "New"
        background.save()

    try:
        asyncio.run(background.perform(rename))
    finally:
        background.close()

    def read(session):
        record = RestaurantRepository(session).get_record("r1")
        return record.name, record.is_favorite

    assert asyncio.run(view.perform(read)) == ("New", True)


def test_background_delete_is_merged_into_view(data, store):
    asyncio.run(data.restaurants.upsert(make_restaurant()))
    assert asyncio.run(data.restaurants.fetch_by_id("r1")) is not None

    background = store.new_background_context()

    def remove(session):
        RestaurantRepository(session).delete("r1")
        background.save()

    try:
        asyncio.run(background.perform(remove))
    finally:
        background.close()

    assert asyncio.run(data.restaurants.fetch_by_id("r1")) is None
    assert asyncio.run(data.restaurants.fetch_all()) == []


def test_wipe_all_removes_every_entity(data, store):
    async def scenario():
        await data.restaurants.upsert(make_restaurant())
        await data.reviews.upsert(make_review("v1"))
        created = await data.lists.create_list("u1", "Lunch")
        await data.lists.add_restaurant(created.id, "r1")
        await data.follows.follow("u1", "u2")

        await store.wipe_all()

        return (
            await data.restaurants.fetch_all(),
            await data.reviews.fetch_all(),
            await data.lists.fetch_all(),
            await data.follows.fetch_all(),
        )

    assert asyncio.run(scenario()) == ([], [], [], [])


def test_wipe_all_on_empty_store(store):
    asyncio.run(store.wipe_all())

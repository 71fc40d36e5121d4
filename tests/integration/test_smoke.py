"""
Integration tests for poststore against a real PostgreSQL instance.

These tests verify that:
1. The factory opens a real pool once and closes it
2. reset/migrate leave the tables present and empty
3. The repositories round-trip rows through the pool

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os

import pytest

from poststore.config import ConnectionOptions
from poststore.domain.models import Post, User
from poststore.errors import NotFoundError, PoolCreationError
from poststore.store import schema
from poststore.store.datastore import FactoryOnce

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
        reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
    ),
]


@pytest.fixture
def store(test_options: ConnectionOptions, db_connection_available: bool):
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")
    factory = FactoryOnce().get(test_options)
    schema.reset(factory.pool)
    yield factory
    factory.close()


def _row_counts(pool) -> dict:
    counts = {}
    with pool.connection() as conn:
        for table in schema.TABLES:
            counts[table.name] = conn.execute(f"SELECT COUNT(*) FROM {table.name}").fetchone()[0]
    return counts


def test_reset_then_migrate_leaves_empty_tables(store) -> None:
    store.users().create(User(username="alice", password="hash"))

    schema.reset(store.pool)
    schema.migrate(store.pool)

    assert _row_counts(store.pool) == {"users": 0, "posts": 0}


def test_repeated_reset_is_idempotent(store) -> None:
    schema.reset(store.pool)
    schema.reset(store.pool)

    assert _row_counts(store.pool) == {"users": 0, "posts": 0}


def test_migrate_keeps_existing_rows(store) -> None:
    store.users().create(User(username="alice", password="hash"))

    schema.migrate(store.pool)

    assert store.users().get("alice").username == "alice"


def test_users_round_trip(store) -> None:
    users = store.users()
    users.create(User(username="alice", password="hash", nickname="Al"))

    updated = users.update(User(username="alice", password="hash2", nickname="Ally"))
    total, items = users.list()
    users.delete("alice")

    assert updated.nickname == "Ally"
    assert total == 1
    assert items[0].username == "alice"
    with pytest.raises(NotFoundError):
        users.get("alice")


def test_posts_round_trip(store) -> None:
    posts = store.posts()
    created = posts.create(Post(username="alice", title="Hello", content="world"))
    posts.create(Post(username="bob", title="Other"))

    total, items = posts.list(username="alice")
    removed = posts.delete_collection("alice", [created.post_id])

    assert created.post_id
    assert total == 1
    assert items[0].post_id == created.post_id
    assert removed == 1


def test_unreachable_database_fails_once(test_options: ConnectionOptions) -> None:
    unreachable = test_options.model_copy(
        update={"host": "127.0.0.1:1", "max_idle_connections": 0}
    )
    once = FactoryOnce()

    with pytest.raises(PoolCreationError) as first:
        once.get(unreachable)
    with pytest.raises(PoolCreationError) as second:
        once.get(test_options)

    assert second.value is first.value

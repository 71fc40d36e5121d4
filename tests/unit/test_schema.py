from __future__ import annotations

import pytest

from poststore.errors import SchemaOperationError
from poststore.store import schema
from poststore.store.schema import TABLES

USERS = "Identifier('users')"
POSTS = "Identifier('posts')"


def _tables_touched(statements: list[str]) -> list[str]:
    touched: list[str] = []
    for text in statements:
        name = USERS if USERS in text else POSTS
        if not touched or touched[-1] != name:
            touched.append(name)
    return touched


def test_tables_declared_in_fixed_order() -> None:
    assert [table.name for table in TABLES] == ["users", "posts"]


def test_migrate_creates_then_adds_columns_in_declaration_order(fake_pool) -> None:
    schema.migrate(fake_pool)

    statements = fake_pool.statements
    assert _tables_touched(statements) == [USERS, POSTS]
    assert all("DROP" not in text for text in statements)
    users_statements = [text for text in statements if USERS in text]
    assert "CREATE TABLE IF NOT EXISTS" in users_statements[0]
    assert all("ADD COLUMN IF NOT EXISTS" in text for text in users_statements[1:])
    expected_columns = len(TABLES[0].columns) - 1
    assert len(users_statements) == 1 + expected_columns


def test_clean_drops_each_table_in_order(fake_pool) -> None:
    schema.clean(fake_pool)

    assert len(fake_pool.statements) == len(TABLES)
    assert all("DROP TABLE IF EXISTS" in text for text in fake_pool.statements)
    assert _tables_touched(fake_pool.statements) == [USERS, POSTS]


def test_migrate_stops_at_first_failing_table(fake_pool) -> None:
    fake_pool.failures[USERS] = RuntimeError("permission denied")

    with pytest.raises(SchemaOperationError) as excinfo:
        schema.migrate(fake_pool)

    assert excinfo.value.operation == "migrate"
    assert excinfo.value.table == "users"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert all(POSTS not in text for text in fake_pool.statements)


def test_clean_failure_leaves_later_tables(fake_pool) -> None:
    fake_pool.failures[POSTS] = RuntimeError("lock timeout")

    with pytest.raises(SchemaOperationError) as excinfo:
        schema.clean(fake_pool)

    assert excinfo.value.table == "posts"
    assert len(fake_pool.statements) == len(TABLES)


def test_reset_runs_clean_then_migrate(fake_pool) -> None:
    schema.reset(fake_pool)

    statements = fake_pool.statements
    drops = [i for i, text in enumerate(statements) if "DROP TABLE" in text]
    creates = [i for i, text in enumerate(statements) if "CREATE TABLE" in text]
    assert drops == [0, 1]
    assert len(creates) == len(TABLES)
    assert min(creates) > max(drops)


def test_reset_skips_migrate_when_clean_fails(fake_pool) -> None:
    fake_pool.failures["DROP TABLE"] = RuntimeError("boom")

    with pytest.raises(SchemaOperationError) as excinfo:
        schema.reset(fake_pool)

    assert excinfo.value.operation == "clean"
    assert all("CREATE TABLE" not in text for text in fake_pool.statements)


def test_repeated_reset_issues_identical_statements(fake_pool) -> None:
    schema.reset(fake_pool)
    first = list(fake_pool.statements)
    fake_pool.executed.clear()

    schema.reset(fake_pool)

    assert fake_pool.statements == first

"""
Schema maintenance for the store tables.

Administrative operations only; nothing calls them at startup or while serving
requests. Use the CLI (`poststore migrate|clean|reset`) or call them directly
with the factory's pool.

- migrate: create missing tables and add missing columns; never drops or
  changes existing data
- clean: drop the tables
- reset: clean, then migrate

Tables are processed in declaration order and each operation stops at the
first table that fails, leaving the earlier tables as they are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Tuple

from psycopg import sql

from poststore.domain.models import Post, User
from poststore.errors import SchemaOperationError
from poststore.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Column:
    name: str
    ddl: str


@dataclass(frozen=True)
class Table:
    name: str
    columns: Tuple[Column, ...]
    constraints: Tuple[str, ...] = ()

    def create_statement(self) -> sql.Composed:
        parts = [sql.SQL("{} {}").format(sql.Identifier(c.name), sql.SQL(c.ddl)) for c in self.columns]
        parts.extend(sql.SQL(c) for c in self.constraints)
        return sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(
            sql.Identifier(self.name), sql.SQL(", ").join(parts)
        )

    def add_column_statement(self, column: Column) -> sql.Composed:
        return sql.SQL("ALTER TABLE {} ADD COLUMN IF NOT EXISTS {} {}").format(
            sql.Identifier(self.name), sql.Identifier(column.name), sql.SQL(column.ddl)
        )

    def drop_statement(self) -> sql.Composed:
        return sql.SQL("DROP TABLE IF EXISTS {} CASCADE").format(sql.Identifier(self.name))


TABLES: Tuple[Table, ...] = (
    Table(
        name=User.table_name,
        columns=(
            Column("id", "BIGSERIAL PRIMARY KEY"),
            Column("username", "VARCHAR(255) NOT NULL"),
            Column("password", "VARCHAR(255) NOT NULL DEFAULT ''"),
            Column("nickname", "VARCHAR(30) NOT NULL DEFAULT ''"),
            Column("email", "VARCHAR(256) NOT NULL DEFAULT ''"),
            Column("phone", "VARCHAR(16) NOT NULL DEFAULT ''"),
            Column("created_at", "TIMESTAMPTZ NOT NULL DEFAULT now()"),
            Column("updated_at", "TIMESTAMPTZ NOT NULL DEFAULT now()"),
        ),
        constraints=("CONSTRAINT users_username_key UNIQUE (username)",),
    ),
    Table(
        name=Post.table_name,
        columns=(
            Column("id", "BIGSERIAL PRIMARY KEY"),
            Column("post_id", "VARCHAR(32) NOT NULL"),
            Column("username", "VARCHAR(255) NOT NULL"),
            Column("title", "VARCHAR(256) NOT NULL"),
            Column("content", "TEXT NOT NULL DEFAULT ''"),
            Column("created_at", "TIMESTAMPTZ NOT NULL DEFAULT now()"),
            Column("updated_at", "TIMESTAMPTZ NOT NULL DEFAULT now()"),
        ),
        constraints=("CONSTRAINT posts_post_id_key UNIQUE (post_id)",),
    ),
)


def _run(pool: Any, operation: str, table: Table, statements: Iterable[sql.Composable]) -> None:
    """Run one table's statements in a single transaction."""
    try:
        with pool.connection() as conn:
            with conn.cursor() as cur:
                for statement in statements:
                    cur.execute(statement)
    except Exception as exc:
        log.error("Schema %s failed on table %s: %s", operation, table.name, exc)
        raise SchemaOperationError(operation, table.name, str(exc)) from exc
    log.info("Schema %s done for table %s", operation, table.name)


def migrate(pool: Any, tables: Tuple[Table, ...] = TABLES) -> None:
    """
    Create missing tables and add missing columns.

    Existing columns and rows are left untouched.
    """
    for table in tables:
        statements = [table.create_statement()]
        statements.extend(table.add_column_statement(c) for c in table.columns if c.name != "id")
        _run(pool, "migrate", table, statements)


def clean(pool: Any, tables: Tuple[Table, ...] = TABLES) -> None:
    """Drop every table."""
    for table in tables:
        _run(pool, "clean", table, [table.drop_statement()])


def reset(pool: Any, tables: Tuple[Table, ...] = TABLES) -> None:
    """Drop and recreate every table; migrate only runs after a complete clean."""
    clean(pool, tables)
    migrate(pool, tables)


__all__ = ["Column", "TABLES", "Table", "clean", "migrate", "reset"]

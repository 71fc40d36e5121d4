from __future__ import annotations

from typer.testing import CliRunner

from poststore import main
from poststore.errors import SchemaOperationError
from poststore.store.datastore import Datastore

runner = CliRunner()
SHORT_ID_COUNT = 3


def test_shortid_prints_requested_count() -> None:
    result = runner.invoke(main.app, ["shortid", "--count", str(SHORT_ID_COUNT)])

    assert result.exit_code == 0
    lines = result.output.split()
    assert len(lines) == SHORT_ID_COUNT
    assert len(set(lines)) == SHORT_ID_COUNT


def test_info_masks_password(monkeypatch, options) -> None:
    monkeypatch.setattr(main, "load_connection_options", lambda: options)

    result = runner.invoke(main.app, ["info"])

    assert result.exit_code == 0
    assert "localhost" in result.output
    assert "******" in result.output


def test_migrate_runs_against_factory_pool(monkeypatch, fake_pool) -> None:
    store = Datastore(fake_pool)
    monkeypatch.setattr(main, "get_factory_or", lambda: store)
    monkeypatch.setattr(main, "_setup_logging", lambda: None)

    result = runner.invoke(main.app, ["migrate"])

    assert result.exit_code == 0
    assert "migrate completed" in result.output
    assert any("CREATE TABLE" in text for text in fake_pool.statements)
    assert store.closed


def test_reset_requires_confirmation(monkeypatch, fake_pool) -> None:
    monkeypatch.setattr(main, "get_factory_or", lambda: Datastore(fake_pool))
    monkeypatch.setattr(main, "_setup_logging", lambda: None)

    result = runner.invoke(main.app, ["reset"], input="n\n")

    assert result.exit_code != 0
    assert fake_pool.executed == []


def test_clean_failure_exits_with_error(monkeypatch, fake_pool) -> None:
    store = Datastore(fake_pool)
    monkeypatch.setattr(main, "get_factory_or", lambda: store)
    monkeypatch.setattr(main, "_setup_logging", lambda: None)

    def failing_clean(pool) -> None:
        raise SchemaOperationError("clean", "users", "permission denied")

    monkeypatch.setattr(main.schema, "clean", failing_clean)

    result = runner.invoke(main.app, ["clean", "--yes"])

    assert result.exit_code == 1
    assert store.closed

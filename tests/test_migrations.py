# tests/test_migrations.py
from sqlalchemy import inspect, text

from orderdesk.core.migrations import current_revision, run_migrations
from orderdesk.database import create_db_engine


def test_upgrade_creates_all_tables(engine):
    tables = set(inspect(engine).get_table_names())

    assert {
        "orders",
        "order_changes",
        "cities",
        "districts",
        "villages",
        "years",
        "alembic_version",
    } <= tables
    assert current_revision(engine) == "0001_initial_schema"


def test_upgrade_is_idempotent(engine):
    run_migrations(engine)

    assert current_revision(engine) == "0001_initial_schema"


def test_sqlite_foreign_keys_are_enforced(engine):
    with engine.connect() as connection:
        assert connection.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_engine_creates_database_directory(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'nested' / 'dir' / 'orders.db'}")
    try:
        run_migrations(engine)
    finally:
        engine.dispose()

    assert (tmp_path / "nested" / "dir" / "orders.db").exists()

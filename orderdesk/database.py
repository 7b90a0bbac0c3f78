# orderdesk/database.py
from pathlib import Path

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, create_engine

# ---------------------------------------------------------
# Engine lifecycle
#
# The engine is created once by the application lifespan
# (see orderdesk/main.py), stored on app.state, and disposed
# at shutdown. Nothing in this module holds a global engine.
#
# SQLite specifics:
#   - foreign_keys=ON    : SQLite ignores FK constraints otherwise
#   - journal_mode=WAL   : readers do not block the single writer
#   - lower()            : replaced with str.lower so that name search
#                          (ILIKE is rendered as lower() LIKE lower())
#                          folds Cyrillic, not just ASCII
#   - isolation_level=None + explicit BEGIN:
#       pysqlite starts transactions lazily and breaks SAVEPOINT
#       handling; the location resolver relies on savepoints for
#       insert-if-absent, so SQLAlchemy must emit BEGIN itself.
# ---------------------------------------------------------


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Build the shared SQLAlchemy engine for `database_url`.

    For file-based SQLite URLs the parent directory is created first.
    """
    url = make_url(database_url)

    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    if url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False},
    )
    _install_sqlite_hooks(engine, wal=bool(url.database) and url.database != ":memory:")
    return engine


def _install_sqlite_hooks(engine: Engine, wal: bool) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Disable pysqlite's own BEGIN handling.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if wal:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def get_session(request: Request):
    """
    Request-scoped session on the engine opened by the lifespan.
    Services decide when to commit; the session is closed afterwards.
    """
    with Session(request.app.state.engine) as session:
        yield session

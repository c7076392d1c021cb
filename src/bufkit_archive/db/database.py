from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ..config import SQLITE_TIMEOUT, index_url
from .migration_runner import run_migrations


def create_index_engine(root: Path) -> Engine:
    """
    Engine for the index of the archive rooted at ``root``. Every archive
    handle owns its own engine and pool; sessions are drawn per operation.
    """
    engine = create_engine(
        index_url(root),
        connect_args={
            "check_same_thread": False,
            "timeout": SQLITE_TIMEOUT,
        },
        future=True,
    )
    event.listen(engine, "connect", _set_sqlite_pragma)
    event.listen(engine, "begin", _emit_begin)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        future=True,
    )


def init_database(engine: Engine) -> None:
    """
    Run Alembic migrations to latest head.
    """
    run_migrations(engine)


def _set_sqlite_pragma(dbapi_connection, _) -> None:
    """
    Hand transaction control to SQLAlchemy so SAVEPOINT works, enable WAL
    for readers alongside a writer, and enforce foreign keys for cascades.
    """
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA synchronous=NORMAL;")
    cursor.execute(f"PRAGMA busy_timeout={int(SQLITE_TIMEOUT * 1000)};")
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


def _emit_begin(connection) -> None:
    connection.exec_driver_sql("BEGIN")


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:  # noqa: BLE001
        session.rollback()
        raise
    finally:
        session.close()


def vacuum(engine: Engine) -> None:
    """Compact the index file. Must run outside any transaction."""
    raw = engine.raw_connection()
    try:
        cursor = raw.cursor()
        cursor.execute("VACUUM;")
        cursor.close()
    finally:
        raw.close()

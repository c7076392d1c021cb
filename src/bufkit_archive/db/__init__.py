"""Index storage for an archive (SQLite via SQLAlchemy + Alembic)."""

from .database import create_index_engine, init_database, make_session_factory, session_scope
from .repositories import FileRepository, SiteRepository

__all__ = [
    "create_index_engine",
    "make_session_factory",
    "session_scope",
    "init_database",
    "SiteRepository",
    "FileRepository",
]

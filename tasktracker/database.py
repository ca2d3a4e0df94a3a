"""Database configuration for SQLAlchemy.

Builds the engine and session factory for the user and task tables. The
task owner column is a foreign key to ``users.id``; on SQLite that is only
enforced when ``PRAGMA foreign_keys`` is switched on for each connection,
which ``_make_engine`` does.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from .settings import settings


class Base(DeclarativeBase):
    """Declarative base class for the users and tasks tables."""
    pass


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()


def _make_engine(url: str) -> Engine:
    """Create an engine for ``url``; SQLite engines enforce task ownership FKs."""
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}
    if url.endswith(":///:memory:"):
        engine = create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    else:
        engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
    _enable_sqlite_foreign_keys(engine)
    return engine


engine = _make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from
`settings.DATABASE_URL` (a local SQLite file `lessons.db` next to the
package by default) and provides small helpers used by the application,
scripts and tests.
"""

from sqlmodel import SQLModel, create_engine, Session
from .config import settings


def make_engine(url: str, echo: bool = False):
    """Create an engine for `url`.

    SQLite connections are shared across the threadpool FastAPI runs sync
    handlers in, so `check_same_thread` is disabled for that dialect.
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


engine = make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)


def create_db_and_tables(bind=None):
    """Create the `lessons` and `quiz_questions` tables if missing.

    This is intended for local development and lightweight deployments;
    schema changes beyond that should go through a migration tool
    (alembic) instead.
    """
    from . import models  # noqa: F401  registers the tables on the metadata
    SQLModel.metadata.create_all(bind if bind is not None else engine)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session

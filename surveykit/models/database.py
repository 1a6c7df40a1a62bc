"""Database engine, session factory and declarative base (SQLAlchemy 2.0).

Survey documents, responses and theme presets all live in one database.
SQLite is the default for local use; any SQLAlchemy URL works in production.
"""

from typing import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from surveykit.config import get_settings


class Base(DeclarativeBase):
    """Declarative base shared by every ORM model."""
    pass


def is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def enable_sqlite_foreign_keys(target_engine: Engine) -> None:
    """Turn on FK enforcement so response rows cascade with their survey."""

    @event.listens_for(target_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, pool_size: int = 5, max_overflow: int = 10, **kwargs) -> Engine:
    """Create an engine configured for the given backend.

    SQLite connections are shared across FastAPI's threadpool and enforce
    foreign keys; other backends get a sized connection pool.

    Args:
        url: SQLAlchemy connection string
        pool_size: Pooled connections (ignored for SQLite)
        max_overflow: Extra connections beyond the pool (ignored for SQLite)
        **kwargs: Passed through to ``create_engine`` (e.g. ``poolclass``)
    """
    options = {"pool_pre_ping": True, "echo": False}
    if is_sqlite(url):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = pool_size
        options["max_overflow"] = max_overflow
    options.update(kwargs)

    new_engine = create_engine(url, **options)
    if is_sqlite(url):
        enable_sqlite_foreign_keys(new_engine)
    return new_engine


settings = get_settings()

engine = build_engine(
    settings.database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Rows stay readable after commit
)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session that is closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

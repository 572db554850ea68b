"""
Lazy SQLAlchemy engine and session factory.

Nothing connects at import time: the engine is built from DATABASE_URL on
first use and rebuilt if the URL changes, so tests can point it at SQLite
before touching the database.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from wellness_clinic.core.config import get_database_url

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine = None
_engine_url = None
_session_factory = None


def _build_engine(database_url: str) -> Engine:
    url = make_url(database_url)
    if url.get_backend_name() == "postgresql":
        return create_engine(
            database_url,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=1800,
            connect_args={"application_name": "wellness_clinic"},
        )
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # one connection, so every session sees the same in-memory schema
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url)


def get_engine() -> Engine:
    global _engine, _engine_url, _session_factory
    database_url = get_database_url()
    if _engine is not None and _engine_url == database_url:
        return _engine

    if _engine is not None:
        _engine.dispose()
    _engine = _build_engine(database_url)
    _engine_url = database_url
    _session_factory = None
    logger.info(
        "Database engine created",
        extra={"context": {"dialect": _engine.dialect.name}},
    )
    return _engine


def get_sessionmaker() -> sessionmaker:
    global _session_factory
    engine = get_engine()
    if _session_factory is None:
        _session_factory = sessionmaker(bind=engine, autoflush=False)
    return _session_factory


def SessionLocal():
    """New Session bound to the current engine."""
    return get_sessionmaker()()


def create_tables() -> None:
    """Create the appointments and bills tables if they do not exist."""
    from wellness_clinic.db import base  # noqa: F401  registers the tables

    Base.metadata.create_all(bind=get_engine())


def drop_tables() -> None:
    from wellness_clinic.db import base  # noqa: F401

    Base.metadata.drop_all(bind=get_engine())

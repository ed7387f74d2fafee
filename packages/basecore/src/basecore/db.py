"""
Database helpers.

Engine and sessions are created lazily from DATABASE_URL so importing
this module never opens a connection.
"""

import functools

from sqlalchemy import MetaData, create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from basecore.settings import get_settings


@functools.lru_cache()
def get_engine() -> Engine:
    """Get SQLAlchemy engine (cached)."""
    url = make_url(get_settings().DATABASE_URL)

    connect_args = {}
    if url.get_backend_name() == "sqlite":
        # Sessions may be used from the CLI's event loop thread
        connect_args["check_same_thread"] = False

    return create_engine(url, pool_pre_ping=True, echo=False, connect_args=connect_args)


@functools.lru_cache()
def get_sessionmaker() -> sessionmaker:
    """Get SQLAlchemy sessionmaker (cached)."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db():
    """
    Generator yielding a database session.

    The session is closed once the consumer is done with it.
    """
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


def create_tables(metadata: MetaData) -> list[str]:
    """Create every missing table of `metadata`; returns the table names."""
    metadata.create_all(get_engine())
    return sorted(metadata.tables)

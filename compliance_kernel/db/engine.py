"""
Module: compliance_kernel.db.engine
Responsibility: SQLAlchemy engine construction and the transactional scope
    every gate operation runs in.  Engines are owned by their caller
    (RegulatoryCheck.from_url, the test fixtures); nothing here is global.
Architecture position: Kernel > DB.  May import from db/base.py.
    MUST NOT import from services/, selectors/, domain/, or outer layers
    (except create_tables, which imports models so metadata is complete).

Invariants enforced:
    - Every public gate operation runs inside session_scope(): commit on
      success, rollback on any exception, so no partial state is committed.
    - PostgreSQL runs at READ COMMITTED with a pre-pinged QueuePool.
    - In-memory SQLite shares one connection (StaticPool) so every session
      sees the same database.
"""

import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from compliance_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

DATABASE_URL_ENV = "COMPLIANCE_DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite://"
_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def database_url_from_env() -> str:
    """Database URL from COMPLIANCE_DATABASE_URL, else in-memory SQLite."""
    url = os.environ.get(DATABASE_URL_ENV, DEFAULT_DATABASE_URL)
    # SQLAlchemy rejects the bare postgres:// scheme
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def build_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create an engine for ``database_url``.

    SQLite URLs get ``check_same_thread=False``; in-memory SQLite additionally
    uses StaticPool so all sessions share the single database.  Pool
    arguments apply to server databases only.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if database_url in _MEMORY_SQLITE_URLS:
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=echo, **kwargs)
    else:
        engine = create_engine(
            database_url,
            echo=echo,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            isolation_level="READ COMMITTED",
        )

    configure_logging()
    logger.info(
        "database_engine_initialized",
        extra={
            "dialect": engine.dialect.name,
            "in_memory": database_url in _MEMORY_SQLITE_URLS,
            "echo": echo,
        },
    )
    return engine


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed.  The exception
        is re-raised to the caller.

    Usage:
        with session_scope(factory) as session:
            session.add(entity)
    """
    session = factory()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.debug("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine) -> None:
    """Create every table the models declare."""
    from compliance_kernel.db.base import Base

    # Importing the models package registers every table on Base.metadata.
    import compliance_kernel.models  # noqa: F401

    Base.metadata.create_all(engine)

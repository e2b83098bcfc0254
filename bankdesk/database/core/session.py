"""
Engine and unit-of-work helpers.

A unit of work is one SQLAlchemy session opened for the duration of a
``with`` block. Everything that touches lazy associations must happen inside
that block; once it exits the session is closed and any further lazy access
fails.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bankdesk.database.config.config import Settings, settings as default_settings
from bankdesk.database.entities import Base

logger = logging.getLogger(__name__)


def build_engine(config: Settings = default_settings) -> Engine:
    """
    Create the SQLAlchemy engine described by ``config``.

    Connections are pre-pinged to avoid handing out stale ones. In-memory
    sqlite databases share a single connection so that every session sees
    the same tables.
    """
    url = config.database_url()
    kwargs = {"echo": config.DB_ECHO, "pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)
    logger.info("Database engine created for %s", url.render_as_string(hide_password=True))
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to ``engine``."""
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def init_db(engine: Engine) -> None:
    """Create all tables registered on the declarative base."""
    Base.metadata.create_all(engine)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


@contextmanager
def unit_of_work(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Context-managed session provider:

        with unit_of_work(factory) as session:
            ...

    Commits when the block exits normally, rolls back and re-raises on
    exception, and always closes the session.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def health_check(engine: Engine) -> Tuple[bool, str]:
    """
    Lightweight connectivity probe for diagnostics.
    Returns (ok, detail).
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, "DB OK (SELECT 1)"
    except Exception as exc:
        logger.error("Database health check failed: %s", exc)
        return False, f"DB ERROR: {exc!s}"

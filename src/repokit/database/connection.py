"""Database connection and session management."""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import MetaData, create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from repokit.config import get_settings
from repokit.models import Base

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the database engine. Single shared instance."""
    global _engine

    if _engine is None:
        settings = get_settings()
        db = settings.database
        url = db.url
        opts: dict = {"echo": db.echo or settings.debug}

        if not db._is_sqlite():
            opts.update(
                pool_size=db.pool_size,
                pool_timeout=db.pool_timeout,
                pool_recycle=db.pool_recycle,
                pool_pre_ping=True,
            )
        elif db._resolved_sqlite_path() is None and not db._use_external():
            # One connection, otherwise every session sees its own empty database
            opts.update(
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )

        _engine = create_engine(url, **opts)
        logger.info("Database engine created: %s", db.db_info_for_logging())

        if db._is_sqlite():
            @event.listens_for(_engine, "connect")
            def _set_sqlite_pragma(dbapi_conn, connection_record):
                cur = dbapi_conn.cursor()
                cur.execute("PRAGMA foreign_keys=ON")
                cur.execute("PRAGMA busy_timeout=30000")
                cur.close()

    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory."""
    global _session_factory

    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Database session with commit/rollback."""
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_database(metadata: MetaData | None = None, engine: Engine | None = None) -> list[str]:
    """
    Create all tables registered on ``metadata`` (default: ``Base.metadata``).

    Idempotent. Returns the names of the tables that were created.
    """
    metadata = metadata if metadata is not None else Base.metadata
    engine = engine if engine is not None else get_engine()

    before = set(inspect(engine).get_table_names())
    metadata.create_all(engine)
    after = set(inspect(engine).get_table_names())
    created = sorted(after - before)

    if created:
        logger.info("Schema init: created tables %s", created)
    else:
        logger.info("Schema init: all tables present")
    return created


def reset_engine() -> None:
    """For testing: clear cached engine."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None

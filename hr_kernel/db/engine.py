"""
Module: hr_kernel.db.engine
Responsibility: One process-wide SQLAlchemy engine and session factory for
    the payroll tables, plus a transactional ``session_scope``.
Architecture position: Kernel > DB.  ``create_tables`` imports the payroll
    ORM so Base.metadata knows every table before DDL runs.

Invariants enforced:
    - session_scope() commits on success and rolls back on any exception.
    - SQLite URLs get a StaticPool so an in-memory database is shared by
      every session; server URLs (``postgresql+psycopg://``) get a
      pre-pinged QueuePool.

Failure modes:
    - RuntimeError from get_engine/get_session before init_engine_from_url().
"""

import atexit
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from hr_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 5,
) -> Engine:
    """
    Create the engine for ``database_url``, replacing any previous one.

    ``sqlite://`` gives an in-memory database for tests and local payroll
    runs; production points at PostgreSQL through psycopg.
    """
    global _engine, _session_factory
    reset_engine()

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        pool_args = {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    else:
        pool_args = {
            "poolclass": QueuePool,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_pre_ping": True,
        }

    _engine = create_engine(url, echo=echo, **pool_args)
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"backend": url.get_backend_name(), "database": url.database},
    )
    return _engine


def _not_initialized() -> RuntimeError:
    return RuntimeError("Engine not initialized. Call init_engine_from_url() first.")


def get_engine() -> Engine:
    if _engine is None:
        raise _not_initialized()
    return _engine


def get_session() -> Session:
    if _session_factory is None:
        raise _not_initialized()
    return _session_factory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Commit on clean exit, roll back and re-raise on error, always close."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    from hr_kernel.db.base import Base
    import hr_modules.payroll.orm  # noqa: F401  registers payroll tables

    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    from hr_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


atexit.register(reset_engine)

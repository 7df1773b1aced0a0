"""Engine and session factories.

Nothing connects at import time; callers build an engine from
``DATABASE_URL`` (or an explicit URL) when storage is actually needed.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from impostofacil import config


def create_db_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """Create an engine for ``url`` or ``DATABASE_URL``.

    In-memory SQLite shares one connection so every session sees the same
    database; server databases get a pre-pinged connection pool.
    """

    dsn = url or config.database_url()
    if not dsn:
        raise ValueError("no database URL given and DATABASE_URL is not set")

    if dsn.startswith("sqlite"):
        if ":memory:" in dsn or dsn in ("sqlite://", "sqlite:///"):
            return create_engine(
                dsn,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=echo,
            )
        return create_engine(dsn, echo=echo)

    return create_engine(
        dsn,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,
        echo=echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Transactional scope: commit on success, roll back and re-raise on error."""

    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create tables directly (tests and local SQLite); production uses Alembic."""

    from impostofacil.db.models import Base

    Base.metadata.create_all(bind=engine)

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Callable, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

from voice_intake.config import get_settings
from voice_intake.errors import ConfigurationError


SessionFactory = Callable[[], Session]


class Base(DeclarativeBase):
    """
    Base class for ORM models.
    """
    pass


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """
    Build the engine on first use.

    DATABASE_URL is optional so the app still boots without storage;
    every request touching the store then answers 503.
    """
    settings = get_settings()
    if not settings.database_url:
        raise ConfigurationError(
            "Intake persistence not configured: DATABASE_URL is not set."
        )

    return create_engine(
        settings.database_url,
        echo=False,  # set True if you want to see SQL queries
        future=True,
        pool_pre_ping=True,
    )


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(
        bind=get_engine(),
        autoflush=False,
        autocommit=False,
        future=True,
    )


@contextmanager
def db_session(factory: SessionFactory) -> Iterator[Session]:
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine: Engine | None = None) -> None:
    """
    Create all tables. Call this once at startup.
    """
    # Registers the mapped classes on Base.metadata.
    from voice_intake import models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def open_session() -> Session:
    """
    Session from the configured engine. Resolved per call, so a missing
    DATABASE_URL surfaces on first use rather than at wiring time.
    """
    return get_session_factory()()

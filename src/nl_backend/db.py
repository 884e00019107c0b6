"""
Engine and session plumbing for the reference database.

The API only reads; writes happen through the loader commands. SQLite is
the default backend, so SQLite connections are allowed to cross
FastAPI's worker threads; other backends get a liveness check on checkout.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import get_database_config


class Base(DeclarativeBase):
    """
    Declarative base shared by the province/district/municipality/ward models.
    """


_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _engine_kwargs(url: str) -> Dict[str, Any]:
    if _is_sqlite(url):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


def get_engine() -> Engine:
    """
    Build the engine on first use and reuse it afterwards.
    """
    global _engine
    if _engine is None:
        url = get_database_config().database_url
        _engine = create_engine(url, **_engine_kwargs(url))
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False)
    return _SessionLocal


@contextmanager
def get_session() -> Iterator[Session]:
    """
    Yield a session scoped to one unit of work.

    The loader relies on the commit at the end; for API reads it is a no-op.
    Any exception rolls the session back and is re-raised.
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["Base", "get_engine", "get_session", "get_session_factory"]

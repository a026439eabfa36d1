# catalog_http_api/db/session.py

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# ---------------------------------------------------------------------------
# Engine / Session factory
# ---------------------------------------------------------------------------


def _is_in_memory_sqlite(url: str) -> bool:
    return url in {"sqlite://", "sqlite:///:memory:", "sqlite+pysqlite://", "sqlite+pysqlite:///:memory:"}


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """
    Create the SQLAlchemy engine for ``url``.

    SQLite needs ``check_same_thread=False`` when used from FastAPI's
    threadpool; an in-memory database additionally needs a single shared
    connection or every session would see an empty database.
    """
    kwargs: dict[str, object] = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_in_memory_sqlite(url):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        class_=Session,
    )


# ---------------------------------------------------------------------------
# FastAPI dependency / helper
# ---------------------------------------------------------------------------


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session from the factory the
    app factory stored on ``app.state`` and ensures it is closed afterwards.

    Usage:

        @router.get("/products")
        def list_products(db: Session = Depends(get_db)):
            ...
    """
    factory: sessionmaker[Session] = request.app.state.session_factory
    db = factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def db_session(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Context manager for non-request usage, e.g. seeding or scripts.

        with db_session(factory) as db:
            ...
    """
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = ["build_engine", "build_session_factory", "get_db", "db_session"]

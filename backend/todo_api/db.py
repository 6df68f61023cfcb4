from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import config
from .errors import StorageUnavailable
from .models import Base

log = logging.getLogger(__name__)


def get_engine(url: str | None = None) -> Engine:
    url = url or config.DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL is required")
    if url.startswith("sqlite"):
        # sync routes run in a threadpool
        engine = create_engine(url, pool_pre_ping=True, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _sqlite_pragmas)
        return engine
    return create_engine(url, pool_pre_ping=True)


def _sqlite_pragmas(dbapi_conn, _record) -> None:
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.execute("PRAGMA busy_timeout=5000")
    cur.close()


def init_db(engine: Engine) -> None:
    # sessions table lives on the same metadata
    from . import auth_sessions  # noqa: F401

    Base.metadata.create_all(bind=engine)


def storable_text(s: str) -> bool:
    # lone surrogates survive JSON decoding but no driver can bind them
    try:
        s.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


@contextmanager
def db_session(engine: Engine) -> Iterator[Session]:
    """Open an ORM session; backend failures surface as StorageUnavailable.

    Objects stay readable after commit so stores can hand them back to callers.
    """
    try:
        with Session(engine, expire_on_commit=False) as s:
            yield s
    except SQLAlchemyError as exc:
        log.error("storage failure: %s", exc.__class__.__name__)
        raise StorageUnavailable() from exc

from __future__ import annotations

from fastapi import Depends, Header, Request
from sqlalchemy.engine import Engine

from . import config
from .errors import StorageUnavailable
from .models import User
from .session_deps import authorize, current_user

_engine: Engine | None = None


def set_engine(engine: Engine | None) -> None:
    global _engine
    _engine = engine


def get_db_engine() -> Engine:
    if _engine is None:
        raise StorageUnavailable("db not ready")
    return _engine


def session_token(request: Request, authorization: str | None = Header(default=None)) -> str | None:
    """Session token from the cookie, or from an ``Authorization: Bearer`` header."""
    sid = request.cookies.get(config.SESSION_COOKIE)
    if sid:
        return sid
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


def require_user(
    request: Request,
    engine: Engine = Depends(get_db_engine),
    token: str | None = Depends(session_token),
) -> User:
    u = authorize(engine, token)
    request.state.user_id = u.id
    return u


def optional_user(
    request: Request,
    engine: Engine = Depends(get_db_engine),
    token: str | None = Depends(session_token),
) -> User | None:
    u = current_user(engine, token)
    if u is not None:
        request.state.user_id = u.id
    return u

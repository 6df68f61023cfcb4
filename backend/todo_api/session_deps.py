from __future__ import annotations

from sqlalchemy.engine import Engine

from .auth_sessions import resolve
from .errors import Unauthenticated
from .models import User


def authorize(engine: Engine, token: str | None) -> User:
    """Gate for every user-scoped operation: token -> user, or Unauthenticated."""
    if not token:
        raise Unauthenticated()
    u = resolve(engine, token)
    if u is None:
        raise Unauthenticated()
    return u


def current_user(engine: Engine, token: str | None) -> User | None:
    # "not logged in" is a normal answer here, not an error
    if not token:
        return None
    return resolve(engine, token)

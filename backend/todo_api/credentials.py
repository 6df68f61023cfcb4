"""Credential store: user registration and password login."""

from __future__ import annotations

import logging
import re

from sqlalchemy import or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from . import config
from .auth import burn_verify, hash_password, verify_password
from .auth_sessions import now_s
from .db import db_session, storable_text
from .errors import DuplicateIdentity, InvalidInput
from .models import User

log = logging.getLogger(__name__)

USERNAME_MAX = 64
EMAIL_MAX = 255

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _validate(username: str, email: str, password: str) -> None:
    if not username or not email or not password:
        raise InvalidInput("username/email/password required")
    if not all(storable_text(v) for v in (username, email, password)):
        raise InvalidInput("username/email/password must be valid text")
    if len(username) > USERNAME_MAX:
        raise InvalidInput(f"username must be at most {USERNAME_MAX} characters")
    if len(email) > EMAIL_MAX or not _EMAIL_RE.match(email):
        raise InvalidInput("invalid email")
    if len(password) < config.PASSWORD_MIN_LENGTH:
        raise InvalidInput(f"password must be at least {config.PASSWORD_MIN_LENGTH} characters")


def register(engine: Engine, username: str, email: str, password: str) -> User:
    username = (username or "").strip()
    email = (email or "").strip()
    _validate(username, email, password)

    with db_session(engine) as s:
        existing = (
            s.execute(select(User.id).where(or_(User.username == username, User.email == email)))
            .scalars()
            .first()
        )
        if existing is not None:
            raise DuplicateIdentity()

        u = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            created_at=now_s(),
        )
        s.add(u)
        try:
            s.commit()
        except IntegrityError:
            # lost a race with a concurrent registration
            s.rollback()
            log.info("register: duplicate identity rejected by storage")
            raise DuplicateIdentity() from None
        s.refresh(u)

    log.info("registered user id=%s", u.id)
    return u


def authenticate(engine: Engine, username: str, password: str) -> User | None:
    username = (username or "").strip()
    if not username or not password:
        return None
    if not storable_text(username):
        burn_verify(password)
        return None

    with db_session(engine) as s:
        u = s.execute(select(User).where(User.username == username)).scalars().first()

    if u is None:
        burn_verify(password)
        return None
    if not verify_password(password, u.password_hash):
        return None
    return u


def get_user(engine: Engine, user_id: int) -> User | None:
    with db_session(engine) as s:
        return s.get(User, int(user_id))

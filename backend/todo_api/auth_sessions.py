"""Session manager: opaque login tokens with a fixed lifetime.

A session is live while ``now < expires_at``. Expired rows are treated as
absent on lookup; ``purge_expired`` only reclaims space.
"""

from __future__ import annotations

import logging
import secrets
import time

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, delete, select
from sqlalchemy.engine import Engine

from . import config
from .db import db_session
from .models import Base, User

log = logging.getLogger(__name__)


class SessionRow(Base):
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(BigInteger, nullable=False)  # unix seconds
    expires_at = Column(BigInteger, nullable=False, index=True)  # unix seconds

    def __repr__(self) -> str:
        return f"<SessionRow user_id={self.user_id} expires_at={self.expires_at}>"


def new_sid() -> str:
    # 256 bits
    return secrets.token_hex(32)


def now_s() -> int:
    return int(time.time())


def create_session(engine: Engine, user_id: int, ttl_seconds: int | None = None) -> SessionRow:
    ttl = config.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
    now = now_s()
    row = SessionRow(id=new_sid(), user_id=int(user_id), created_at=now, expires_at=now + ttl)
    with db_session(engine) as s:
        s.add(row)
        s.commit()
    return row


def resolve(engine: Engine, token: str | None) -> User | None:
    if not token:
        return None
    with db_session(engine) as s:
        return (
            s.execute(
                select(User)
                .join(SessionRow, SessionRow.user_id == User.id)
                .where(SessionRow.id == token, SessionRow.expires_at > now_s())
            )
            .scalars()
            .first()
        )


def revoke(engine: Engine, token: str | None) -> bool:
    if not token:
        return False
    with db_session(engine) as s:
        res = s.execute(delete(SessionRow).where(SessionRow.id == token))
        s.commit()
        return res.rowcount > 0


def purge_expired(engine: Engine) -> int:
    with db_session(engine) as s:
        res = s.execute(delete(SessionRow).where(SessionRow.expires_at <= now_s()))
        s.commit()
    if res.rowcount:
        log.info("purged %d expired sessions", res.rowcount)
    return res.rowcount

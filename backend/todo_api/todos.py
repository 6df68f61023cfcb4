"""Todo store. Every query is filtered by the owning user's id."""

from __future__ import annotations

from sqlalchemy import delete, select, update
from sqlalchemy.engine import Engine

from .auth_sessions import now_s
from .db import db_session, storable_text
from .errors import InvalidInput
from .models import Todo

TITLE_MAX = 256

# widest primary key any supported backend stores
ID_MAX = 2**63 - 1


def _valid_id(todo_id: int) -> bool:
    return 1 <= int(todo_id) <= ID_MAX


def list_todos(engine: Engine, user_id: int) -> list[Todo]:
    with db_session(engine) as s:
        rows = (
            s.execute(
                select(Todo)
                .where(Todo.user_id == int(user_id))
                .order_by(Todo.created_at.desc(), Todo.id.desc())
            )
            .scalars()
            .all()
        )
        return list(rows)


def get_todo(engine: Engine, user_id: int, todo_id: int) -> Todo | None:
    if not _valid_id(todo_id):
        return None
    with db_session(engine) as s:
        return (
            s.execute(select(Todo).where(Todo.id == int(todo_id), Todo.user_id == int(user_id)))
            .scalars()
            .first()
        )


def create_todo(engine: Engine, user_id: int, title: str) -> Todo:
    title = (title or "").strip()
    if not title:
        raise InvalidInput("title is required")
    if not storable_text(title):
        raise InvalidInput("title must be valid text")
    if len(title) > TITLE_MAX:
        raise InvalidInput(f"title must be at most {TITLE_MAX} characters")

    now = now_s()
    with db_session(engine) as s:
        t = Todo(user_id=int(user_id), title=title, completed=False, created_at=now, updated_at=now)
        s.add(t)
        s.commit()
        s.refresh(t)
        return t


def update_completion(engine: Engine, user_id: int, todo_id: int, completed: bool) -> Todo | None:
    if not _valid_id(todo_id):
        return None
    with db_session(engine) as s:
        # ownership filter and write in one statement
        res = s.execute(
            update(Todo)
            .where(Todo.id == int(todo_id), Todo.user_id == int(user_id))
            .values(completed=bool(completed), updated_at=now_s())
            .execution_options(synchronize_session=False)
        )
        if res.rowcount == 0:
            s.rollback()
            return None
        t = (
            s.execute(select(Todo).where(Todo.id == int(todo_id), Todo.user_id == int(user_id)))
            .scalars()
            .first()
        )
        s.commit()
        return t


def delete_todo(engine: Engine, user_id: int, todo_id: int) -> bool:
    if not _valid_id(todo_id):
        return False
    with db_session(engine) as s:
        res = s.execute(
            delete(Todo)
            .where(Todo.id == int(todo_id), Todo.user_id == int(user_id))
            .execution_options(synchronize_session=False)
        )
        s.commit()
        return res.rowcount > 0

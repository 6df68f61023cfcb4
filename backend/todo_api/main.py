from __future__ import annotations

import logging
import time

from fastapi import Depends, FastAPI, Response
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from . import config
from .auth_sessions import create_session, purge_expired, revoke
from .credentials import authenticate, register
from .db import get_engine, init_db
from .deps import get_db_engine, optional_user, require_user, session_token, set_engine
from .errors import InvalidCredentials, NotFound, register_error_handlers
from .logs import AccessLogMiddleware, configure_logging
from .models import Todo, User
from .schemas import AuthIn, DeleteOut, OkOut, SignupIn, TodoCreate, TodoOut, TodoToggle, UserOut
from .todos import create_todo, delete_todo, get_todo, list_todos, update_completion

configure_logging()
log = logging.getLogger(__name__)

app = FastAPI(title="Todo API")
app.add_middleware(AccessLogMiddleware)
register_error_handlers(app)


@app.on_event("startup")
def _startup():
    # The database container might not be ready when the API boots.
    # Retry a few times before failing hard.
    last_exc: Exception | None = None
    for _ in range(max(config.DB_INIT_RETRIES, 1)):
        try:
            engine = get_engine()
            init_db(engine)
            set_engine(engine)
            purge_expired(engine)
            log.info("database ready")
            return
        except SQLAlchemyError as exc:
            last_exc = exc
            log.warning("database not ready: %s", exc.__class__.__name__)
            time.sleep(1.0)
    raise RuntimeError(f"DB init failed after retries: {last_exc}")


def _user_out(u: User) -> UserOut:
    return UserOut(id=int(u.id), username=u.username, email=u.email, created_at=int(u.created_at))


def _todo_out(t: Todo) -> TodoOut:
    return TodoOut(
        id=int(t.id),
        title=t.title,
        completed=bool(t.completed),
        created_at=int(t.created_at),
        updated_at=int(t.updated_at),
        user_id=int(t.user_id),
    )


@app.get("/health")
def health(engine: Engine = Depends(get_db_engine)):
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        db_ok = False
    return {"ok": db_ok, "db": db_ok}


@app.get("/healthz")
async def healthz():
    # super cheap liveness probe
    return {"ok": True}


@app.post("/api/register", response_model=UserOut, status_code=201)
def register_user(body: SignupIn, engine: Engine = Depends(get_db_engine)):
    u = register(engine, body.username, body.email, body.password)
    return _user_out(u)


@app.post("/api/login", response_model=UserOut)
def login(body: AuthIn, response: Response, engine: Engine = Depends(get_db_engine)):
    u = authenticate(engine, body.username, body.password)
    if u is None:
        log.info("login failed")
        raise InvalidCredentials()

    sess = create_session(engine, int(u.id))
    log.info("login user id=%s", u.id)

    response.set_cookie(
        key=config.SESSION_COOKIE,
        value=sess.id,
        httponly=True,
        samesite="strict",
        secure=config.SESSION_COOKIE_SECURE,
        path="/",
        max_age=config.SESSION_TTL_SECONDS,
    )
    return _user_out(u)


@app.post("/api/logout", response_model=OkOut)
def logout(
    response: Response,
    engine: Engine = Depends(get_db_engine),
    token: str | None = Depends(session_token),
):
    if revoke(engine, token):
        log.info("logout")
    response.delete_cookie(
        key=config.SESSION_COOKIE,
        path="/",
        secure=config.SESSION_COOKIE_SECURE,
        httponly=True,
        samesite="strict",
    )
    return OkOut(ok=True)


@app.get("/api/me", response_model=UserOut | None)
def me(u: User | None = Depends(optional_user)):
    return _user_out(u) if u is not None else None


@app.get("/api/todos", response_model=list[TodoOut])
def todos(u: User = Depends(require_user), engine: Engine = Depends(get_db_engine)):
    return [_todo_out(t) for t in list_todos(engine, int(u.id))]


@app.post("/api/todos", response_model=TodoOut, status_code=201)
def add_todo(body: TodoCreate, u: User = Depends(require_user), engine: Engine = Depends(get_db_engine)):
    return _todo_out(create_todo(engine, int(u.id), body.title))


@app.get("/api/todos/{todo_id}", response_model=TodoOut)
def todo_by_id(todo_id: int, u: User = Depends(require_user), engine: Engine = Depends(get_db_engine)):
    t = get_todo(engine, int(u.id), todo_id)
    if t is None:
        raise NotFound("todo not found")
    return _todo_out(t)


@app.post("/api/todos/{todo_id}/toggle", response_model=TodoOut)
def toggle_todo(
    todo_id: int,
    body: TodoToggle,
    u: User = Depends(require_user),
    engine: Engine = Depends(get_db_engine),
):
    t = update_completion(engine, int(u.id), todo_id, body.completed)
    if t is None:
        raise NotFound("todo not found")
    return _todo_out(t)


@app.post("/api/todos/{todo_id}/delete", response_model=DeleteOut)
def remove_todo(todo_id: int, u: User = Depends(require_user), engine: Engine = Depends(get_db_engine)):
    return DeleteOut(deleted=delete_todo(engine, int(u.id), todo_id))

import os

# cheap hashes for tests; must be set before todo_api.config is imported
os.environ.setdefault("PBKDF2_ITERS", "1000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from todo_api.credentials import register
from todo_api.db import get_engine, init_db
from todo_api.deps import get_db_engine
from todo_api.main import app

PASSWORD = "correct horse"


@pytest.fixture
def engine(tmp_path):
    eng = get_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def alice(engine):
    return register(engine, "alice", "alice@example.com", PASSWORD)


@pytest.fixture
def bob(engine):
    return register(engine, "bob", "bob@example.com", PASSWORD)


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_db_engine] = lambda: engine
    # https so the Secure session cookie is sent back
    c = TestClient(app, base_url="https://testserver")
    yield c
    c.close()
    app.dependency_overrides.clear()


@pytest.fixture
def make_client(engine):
    """Extra clients with their own cookie jars, for multi-user tests."""
    app.dependency_overrides[get_db_engine] = lambda: engine
    clients = []

    def _make():
        c = TestClient(app, base_url="https://testserver")
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()
    app.dependency_overrides.clear()


def signup_and_login(c, username, password=PASSWORD):
    res = c.post(
        "/api/register",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    assert res.status_code == 201, res.text
    res = c.post("/api/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    return res.json()

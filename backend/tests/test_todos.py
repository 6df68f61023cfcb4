import pytest

from todo_api import todos as todo_store
from todo_api.db import get_engine
from todo_api.errors import InvalidInput, StorageUnavailable
from todo_api.todos import create_todo, delete_todo, get_todo, list_todos, update_completion


def test_create_is_scoped_to_owner(engine, alice, bob):
    create_todo(engine, alice.id, "buy milk")

    mine = list_todos(engine, alice.id)
    assert [(t.title, t.completed) for t in mine] == [("buy milk", False)]
    assert list_todos(engine, bob.id) == []


def test_create_sets_fields(engine, alice):
    t = create_todo(engine, alice.id, "  water plants  ")
    assert t.id is not None
    assert t.title == "water plants"
    assert t.completed is False
    assert t.user_id == alice.id
    assert t.created_at == t.updated_at


@pytest.mark.parametrize("title", ["", "   ", "\t\n", "x" * 257])
def test_create_rejects_bad_titles(engine, alice, title):
    with pytest.raises(InvalidInput):
        create_todo(engine, alice.id, title)
    assert list_todos(engine, alice.id) == []


def test_list_newest_first(engine, alice, monkeypatch):
    clock = iter([100, 200, 200])
    monkeypatch.setattr(todo_store, "now_s", lambda: next(clock))
    first = create_todo(engine, alice.id, "first")
    second = create_todo(engine, alice.id, "second")
    third = create_todo(engine, alice.id, "third")

    assert [t.id for t in list_todos(engine, alice.id)] == [third.id, second.id, first.id]


def test_get_round_trip(engine, alice):
    created = create_todo(engine, alice.id, "read a book")
    got = get_todo(engine, alice.id, created.id)
    assert got is not None
    assert (got.id, got.title, got.completed, got.created_at, got.updated_at, got.user_id) == (
        created.id,
        created.title,
        created.completed,
        created.created_at,
        created.updated_at,
        created.user_id,
    )


def test_get_other_users_todo_is_absent(engine, alice, bob):
    t = create_todo(engine, alice.id, "secret")
    assert get_todo(engine, bob.id, t.id) is None
    assert get_todo(engine, alice.id, t.id + 100) is None


def test_update_completion(engine, alice, monkeypatch):
    monkeypatch.setattr(todo_store, "now_s", lambda: 1000)
    t = create_todo(engine, alice.id, "ship it")

    monkeypatch.setattr(todo_store, "now_s", lambda: 2000)
    done = update_completion(engine, alice.id, t.id, True)
    assert done is not None
    assert done.completed is True
    assert done.updated_at == 2000
    assert done.created_at == 1000
    assert done.title == "ship it"

    undone = update_completion(engine, alice.id, t.id, False)
    assert undone.completed is False


def test_update_completion_other_user_is_noop(engine, alice, bob):
    t = create_todo(engine, alice.id, "mine")
    assert update_completion(engine, bob.id, t.id, True) is None

    again = get_todo(engine, alice.id, t.id)
    assert again.completed is False
    assert again.updated_at == t.updated_at


def test_update_completion_missing(engine, alice):
    assert update_completion(engine, alice.id, 12345, True) is None


def test_delete_is_idempotent(engine, alice):
    t = create_todo(engine, alice.id, "temp")
    assert delete_todo(engine, alice.id, t.id) is True
    assert delete_todo(engine, alice.id, t.id) is False
    assert get_todo(engine, alice.id, t.id) is None


def test_delete_other_users_todo(engine, alice, bob):
    t = create_todo(engine, alice.id, "keep")
    assert delete_todo(engine, bob.id, t.id) is False
    assert get_todo(engine, alice.id, t.id) is not None


def test_storage_failure_is_wrapped(tmp_path):
    broken = get_engine(f"sqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
    with pytest.raises(StorageUnavailable) as exc_info:
        list_todos(broken, 1)
    assert "sqlite" not in str(exc_info.value).lower()


@pytest.mark.parametrize("todo_id", [0, -1, 2**63, 2**70])
def test_out_of_range_ids_are_absent(engine, alice, todo_id):
    create_todo(engine, alice.id, "real")
    assert get_todo(engine, alice.id, todo_id) is None
    assert update_completion(engine, alice.id, todo_id, True) is None
    assert delete_todo(engine, alice.id, todo_id) is False


def test_create_rejects_unencodable_title(engine, alice):
    with pytest.raises(InvalidInput):
        create_todo(engine, alice.id, "milk \ud800")

import asyncio
import json
import os

import pytest

from app.todo.exceptions import StorageError
from app.todo.schemas import Todo
from app.todo.store import TodoStore


def _todo(todo_id: int, text: str = "task", completed: bool = False) -> Todo:
    return Todo(id=todo_id, text=text, completed=completed, created_at="2024-01-01T00:00:00.000Z")


def test_initialize_creates_empty_document(store, todos_file):
    asyncio.run(store.initialize())

    assert json.loads(todos_file.read_text(encoding="utf-8")) == []


def test_initialize_is_idempotent(store, todos_file):
    todos_file.write_text(json.dumps([_todo(1).to_json_dict()]), encoding="utf-8")

    asyncio.run(store.initialize())
    asyncio.run(store.initialize())

    assert [t.id for t in asyncio.run(store.read_all())] == [1]


def test_initialize_creates_missing_directories(tmp_path):
    store = TodoStore(tmp_path / "nested" / "data" / "todos.json")

    asyncio.run(store.initialize())

    assert store.path.exists()


def test_round_trip_preserves_order(store):
    todos = [_todo(3, "c"), _todo(1, "a", completed=True), _todo(2, "b")]

    asyncio.run(store.write_all(todos))

    assert asyncio.run(store.read_all()) == todos


def test_on_disk_format(store, todos_file):
    asyncio.run(store.write_all([_todo(7, "buy milk")]))

    data = json.loads(todos_file.read_text(encoding="utf-8"))
    assert data == [
        {"id": 7, "text": "buy milk", "completed": False, "createdAt": "2024-01-01T00:00:00.000Z"}
    ]


def test_read_missing_document_raises(store):
    with pytest.raises(StorageError):
        asyncio.run(store.read_all())


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        '{"id": 1}',
        '[{"id": "abc", "text": "x", "completed": false, "createdAt": "t"}]',
        '[{"id": 1, "text": "x"}]',
        '[{"id": 1, "text": "a", "completed": false, "createdAt": "t"},'
        ' {"id": 1, "text": "b", "completed": false, "createdAt": "t"}]',
    ],
)
def test_read_invalid_document_raises(store, todos_file, content):
    todos_file.write_text(content, encoding="utf-8")

    with pytest.raises(StorageError):
        asyncio.run(store.read_all())


def test_write_leaves_no_temp_files(store, tmp_path, todos_file):
    asyncio.run(store.initialize())
    asyncio.run(store.write_all([_todo(1), _todo(2)]))

    assert list(tmp_path.iterdir()) == [todos_file]


def test_failed_write_keeps_previous_document(store, tmp_path, todos_file, monkeypatch):
    asyncio.run(store.write_all([_todo(1)]))
    before = todos_file.read_text(encoding="utf-8")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)

    with pytest.raises(StorageError):
        asyncio.run(store.write_all([_todo(1), _todo(2)]))

    assert todos_file.read_text(encoding="utf-8") == before
    assert list(tmp_path.iterdir()) == [todos_file]


def test_write_into_missing_directory_raises(tmp_path):
    store = TodoStore(tmp_path / "missing" / "todos.json")

    with pytest.raises(StorageError):
        asyncio.run(store.write_all([_todo(1)]))


@pytest.mark.parametrize(
    "entry",
    [
        {"id": 1, "text": "", "completed": False, "createdAt": "2024-01-01T00:00:00.000Z"},
        {"id": 1, "text": "  padded  ", "completed": False, "createdAt": "2024-01-01T00:00:00.000Z"},
        {"id": 1, "text": "ok", "completed": False, "createdAt": "yesterday"},
    ],
)
def test_read_rejects_broken_invariants(store, todos_file, entry):
    todos_file.write_text(json.dumps([entry]), encoding="utf-8")

    with pytest.raises(StorageError):
        asyncio.run(store.read_all())


def test_lone_surrogate_written_and_read_back(store, todos_file):
    todos = [_todo(1, "a\ud800b")]

    asyncio.run(store.write_all(todos))

    assert "\\ud800" in todos_file.read_text(encoding="utf-8")
    assert asyncio.run(store.read_all()) == todos

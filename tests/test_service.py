import asyncio
import re

import pytest

from app.todo.exceptions import NotFoundError, ValidationError
from app.todo.schemas import Todo, utc_now_iso
from app.todo.service import TodoService, next_todo_id, normalize_text


def _todo(todo_id: int) -> Todo:
    return Todo(id=todo_id, text="x", created_at="2024-01-01T00:00:00.000Z")


async def _init(service: TodoService) -> TodoService:
    await service.store.initialize()
    return service


def test_normalize_text_trims():
    assert normalize_text("  buy milk  ") == "buy milk"


@pytest.mark.parametrize("text", [None, "", "   ", "\t\n"])
def test_normalize_text_rejects_blank(text):
    with pytest.raises(ValidationError):
        normalize_text(text)


def test_next_id_uses_current_millis():
    assert next_todo_id([], now_ms=1_700_000_000_000) == 1_700_000_000_000
    assert next_todo_id([_todo(5)], now_ms=1_700_000_000_000) == 1_700_000_000_000


def test_next_id_never_collides_within_same_millisecond():
    assert next_todo_id([_todo(1_000)], now_ms=1_000) == 1_001
    # clock went backwards
    assert next_todo_id([_todo(2_000)], now_ms=1_000) == 2_001


def test_created_at_is_iso_utc():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_now_iso())


def test_rapid_creates_get_unique_increasing_ids(service):
    async def scenario():
        await _init(service)
        return [await service.create_todo(f"task {i}") for i in range(20)]

    created = asyncio.run(scenario())
    ids = [t.id for t in created]

    assert ids == sorted(ids)
    assert len(set(ids)) == 20


def test_concurrent_creates_lose_no_update(service):
    async def scenario():
        await _init(service)
        await asyncio.gather(*(service.create_todo(f"task {i}") for i in range(25)))
        return await service.list_todos()

    todos = asyncio.run(scenario())

    assert len(todos) == 25
    assert {t.text for t in todos} == {f"task {i}" for i in range(25)}
    assert len({t.id for t in todos}) == 25


def test_concurrent_toggles_all_apply(service):
    async def scenario():
        await _init(service)
        todo = await service.create_todo("flip me")
        await asyncio.gather(*(service.toggle_todo(todo.id) for _ in range(6)))
        return await service.list_todos()

    (todo,) = asyncio.run(scenario())

    assert todo.completed is False


def test_toggle_twice_restores(service):
    async def scenario():
        await _init(service)
        todo = await service.create_todo("walk dog")
        first = await service.toggle_todo(todo.id)
        second = await service.toggle_todo(todo.id)
        return first, second

    first, second = asyncio.run(scenario())

    assert first.completed is True
    assert second.completed is False


def test_update_text_trims_and_keeps_other_fields(service):
    async def scenario():
        await _init(service)
        todo = await service.create_todo("draft")
        updated = await service.update_text(todo.id, "  final  ")
        return todo, updated

    todo, updated = asyncio.run(scenario())

    assert updated.text == "final"
    assert updated.id == todo.id
    assert updated.created_at == todo.created_at
    assert updated.completed == todo.completed


def test_missing_id_raises_not_found(service):
    async def scenario():
        await _init(service)
        await service.create_todo("keep")
        for op in (
            lambda: service.toggle_todo(1),
            lambda: service.update_text(1, "new"),
            lambda: service.delete_todo(1),
        ):
            with pytest.raises(NotFoundError):
                await op()
        return await service.list_todos()

    todos = asyncio.run(scenario())

    assert [t.text for t in todos] == ["keep"]


def test_blank_text_does_not_touch_store(service, todos_file):
    asyncio.run(_init(service))
    before = todos_file.read_text(encoding="utf-8")

    with pytest.raises(ValidationError):
        asyncio.run(service.create_todo("   "))

    assert todos_file.read_text(encoding="utf-8") == before

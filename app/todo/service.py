"""
Todo 业务服务：每个操作都是 读全量 → 校验/定位 → 修改 → 写全量

所有写操作都在 TodoStore.transaction() 内完成；
校验失败（空文本）在进入临界区之前就抛出，不会触碰存储。
"""

import time

import structlog

from app.observability.metrics import TODO_OPERATION_TOTAL
from app.todo.exceptions import NotFoundError, ValidationError
from app.todo.schemas import Todo, utc_now_iso
from app.todo.store import TodoStore

log = structlog.get_logger()

TEXT_REQUIRED = "Todo text is required"
NOT_FOUND = "Todo not found"


def normalize_text(text: str | None) -> str:
    """去掉首尾空白，结果为空时抛 ValidationError"""
    cleaned = text.strip() if isinstance(text, str) else ""
    if not cleaned:
        raise ValidationError(TEXT_REQUIRED)
    return cleaned


def next_todo_id(todos: list[Todo], now_ms: int | None = None) -> int:
    """
    新 id = 当前毫秒时间戳；若不大于已有最大 id（同一毫秒内连续创建、时钟回拨），
    则取最大 id + 1，保证单调递增且不重复
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    highest = max((t.id for t in todos), default=0)
    return now_ms if now_ms > highest else highest + 1


class TodoService:
    """Todo 列表的增删改查，持有一个 TodoStore"""

    def __init__(self, store: TodoStore):
        self.store = store

    async def list_todos(self) -> list[Todo]:
        async with self.store.transaction():
            todos = await self.store.read_all()
        TODO_OPERATION_TOTAL.labels(operation="list", outcome="ok").inc()
        return todos

    async def create_todo(self, text: str | None) -> Todo:
        cleaned = self._validated_text("create", text)

        async with self.store.transaction():
            todos = await self.store.read_all()
            todo = Todo(
                id=next_todo_id(todos),
                text=cleaned,
                completed=False,
                created_at=utc_now_iso(),
            )
            todos.append(todo)
            await self.store.write_all(todos)

        TODO_OPERATION_TOTAL.labels(operation="create", outcome="ok").inc()
        log.info("Todo 已创建", todo_id=todo.id, total=len(todos))
        return todo

    async def toggle_todo(self, todo_id: int) -> Todo:
        async with self.store.transaction():
            todos = await self.store.read_all()
            index = self._locate("toggle", todos, todo_id)
            todo = todos[index].model_copy(update={"completed": not todos[index].completed})
            todos[index] = todo
            await self.store.write_all(todos)

        TODO_OPERATION_TOTAL.labels(operation="toggle", outcome="ok").inc()
        log.info("Todo 完成状态已切换", todo_id=todo_id, completed=todo.completed)
        return todo

    async def update_text(self, todo_id: int, text: str | None) -> Todo:
        cleaned = self._validated_text("update", text)

        async with self.store.transaction():
            todos = await self.store.read_all()
            index = self._locate("update", todos, todo_id)
            todo = todos[index].model_copy(update={"text": cleaned})
            todos[index] = todo
            await self.store.write_all(todos)

        TODO_OPERATION_TOTAL.labels(operation="update", outcome="ok").inc()
        log.info("Todo 文本已修改", todo_id=todo_id)
        return todo

    async def delete_todo(self, todo_id: int) -> None:
        async with self.store.transaction():
            todos = await self.store.read_all()
            remaining = [t for t in todos if t.id != todo_id]
            if len(remaining) == len(todos):
                TODO_OPERATION_TOTAL.labels(operation="delete", outcome="not_found").inc()
                raise NotFoundError(NOT_FOUND)
            await self.store.write_all(remaining)

        TODO_OPERATION_TOTAL.labels(operation="delete", outcome="ok").inc()
        log.info("Todo 已删除", todo_id=todo_id, total=len(remaining))

    # ── 内部工具 ──

    @staticmethod
    def _validated_text(operation: str, text: str | None) -> str:
        try:
            return normalize_text(text)
        except ValidationError:
            TODO_OPERATION_TOTAL.labels(operation=operation, outcome="invalid").inc()
            raise

    @staticmethod
    def _locate(operation: str, todos: list[Todo], todo_id: int) -> int:
        for index, todo in enumerate(todos):
            if todo.id == todo_id:
                return index
        TODO_OPERATION_TOTAL.labels(operation=operation, outcome="not_found").inc()
        raise NotFoundError(NOT_FOUND)

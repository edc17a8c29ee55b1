"""
Todo 模块：单文档 JSON 持久化的任务列表

提供 TodoStore（文件存储）、TodoService（读-改-写业务操作）和 Todo schema，
供 app.api.todos 路由使用。
"""

from app.todo.exceptions import NotFoundError, StorageError, TodoError, ValidationError
from app.todo.schemas import Todo
from app.todo.service import TodoService
from app.todo.store import TodoStore

__all__ = [
    "NotFoundError",
    "StorageError",
    "Todo",
    "TodoError",
    "TodoService",
    "TodoStore",
    "ValidationError",
]

"""
pytest 公共 fixture：每个用例使用 tmp_path 下独立的 Todo 存储文档
"""

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.todo.service import TodoService
from app.todo.store import TodoStore


@pytest.fixture
def todos_file(tmp_path):
    return tmp_path / "todos.json"


@pytest.fixture
def settings(todos_file):
    return Settings(TODOS_FILE=todos_file)


@pytest.fixture
def store(todos_file):
    return TodoStore(todos_file)


@pytest.fixture
def service(store):
    return TodoService(store)


@pytest.fixture
def client(settings, store):
    """启动完整应用（含 lifespan，会初始化存储文档）"""
    app = create_app(settings, store)
    with TestClient(app) as c:
        yield c

"""
FastAPI 依赖注入：TodoService 获取 + 路径 id 统一校验
"""

import re

from fastapi import Request

from app.todo.exceptions import ValidationError
from app.todo.service import TodoService

_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)

INVALID_ID = "Invalid ID"


def get_todo_service(request: Request) -> TodoService:
    """FastAPI 依赖注入：获取应用生命周期内创建的 TodoService"""
    return request.app.state.todo_service


def valid_todo_id(todo_id: str) -> int:
    """所有带 {id} 的路由共用：先校验 id 为整数，不合法直接 400，不访问存储"""
    candidate = todo_id.strip()
    if not _INT_RE.fullmatch(candidate):
        raise ValidationError(INVALID_ID)
    try:
        return int(candidate)
    except ValueError:
        # 超过解释器整数字符串长度上限
        raise ValidationError(INVALID_ID) from None

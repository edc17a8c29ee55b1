"""
健康检查接口：探活 + 存储文档可读性
"""

import structlog
from fastapi import APIRouter, Depends

from app.api.deps import get_todo_service
from app.todo.exceptions import StorageError
from app.todo.service import TodoService

router = APIRouter(tags=["健康检查"])
log = structlog.get_logger()


@router.get("/health")
async def health_check(service: TodoService = Depends(get_todo_service)):
    """健康检查：校验 Todo 存储文档能否正常解析"""
    status = {"status": "ok", "store": "ok"}

    try:
        await service.store.read_all()
    except StorageError as e:
        status["store"] = f"error: {e.message}"
        status["status"] = "degraded"
        log.error("存储健康检查失败", error=e.message)

    return status

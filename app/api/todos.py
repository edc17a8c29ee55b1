"""
/api/todos 接口：Todo 列表的增删改查

端点：
- GET    /api/todos            — 全量列表（插入顺序）
- POST   /api/todos            — 新建，201
- PUT    /api/todos/{todo_id}  — 切换完成状态
- PATCH  /api/todos/{todo_id}  — 修改文本
- DELETE /api/todos/{todo_id}  — 删除

业务异常（400/404/500）由 app.api.errors 统一转为 {"error": ...}。
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_todo_service, valid_todo_id
from app.todo.schemas import ErrorOut, MessageOut, Todo, TodoTextIn
from app.todo.service import TodoService

router = APIRouter(prefix="/api/todos", tags=["Todo"])

_errors = {
    400: {"model": ErrorOut},
    404: {"model": ErrorOut},
    500: {"model": ErrorOut},
}


def _serialize(todo: Todo) -> dict:
    return todo.to_json_dict()


@router.get("", responses={500: {"model": ErrorOut}})
async def list_todos(service: TodoService = Depends(get_todo_service)) -> list[dict]:
    """返回全部 Todo"""
    return [_serialize(t) for t in await service.list_todos()]


@router.post("", status_code=201, responses=_errors)
async def create_todo(
    payload: TodoTextIn | None = None,
    service: TodoService = Depends(get_todo_service),
) -> dict:
    """新建 Todo：text 去首尾空白后不能为空"""
    return _serialize(await service.create_todo(payload.text if payload else None))


@router.put("/{todo_id}", responses=_errors)
async def toggle_todo(
    todo_id: int = Depends(valid_todo_id),
    service: TodoService = Depends(get_todo_service),
) -> dict:
    """切换完成状态"""
    return _serialize(await service.toggle_todo(todo_id))


@router.patch("/{todo_id}", responses=_errors)
async def update_todo_text(
    todo_id: int = Depends(valid_todo_id),
    payload: TodoTextIn | None = None,
    service: TodoService = Depends(get_todo_service),
) -> dict:
    """修改文本，校验规则与新建一致"""
    return _serialize(await service.update_text(todo_id, payload.text if payload else None))


@router.delete("/{todo_id}", response_model=MessageOut, responses=_errors)
async def delete_todo(
    todo_id: int = Depends(valid_todo_id),
    service: TodoService = Depends(get_todo_service),
) -> MessageOut:
    await service.delete_todo(todo_id)
    return MessageOut(message="Todo deleted successfully")

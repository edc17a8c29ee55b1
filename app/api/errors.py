"""
全局异常处理：业务异常 → {"error": message}

- ValidationError / NotFoundError：本地可预期错误，直接回 400 / 404 + message
- StorageError / 未捕获异常：记录日志（带 trace_id），统一回 500，不向调用方泄露内部细节
- RequestValidationError（请求体不是合法 JSON / 字段类型不对）：按 400 处理
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.observability.context import get_trace_id
from app.todo.exceptions import StorageError, TodoError

log = structlog.get_logger()

INTERNAL_ERROR = "Internal Server Error"
INVALID_BODY = "Invalid request body"


def request_trace_id(request: Request) -> str:
    """取当前请求的 trace_id：优先 request.state（中间件写入），其次请求头，最后 contextvar"""
    return (
        getattr(request.state, "trace_id", "")
        or request.headers.get("X-Trace-ID", "")
        or get_trace_id()
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
    if isinstance(exc, StorageError) or exc.status_code >= 500:
        log.error(
            "存储异常，请求失败",
            path=request.url.path,
            error=exc.message,
            cause=repr(getattr(exc, "cause", None)),
            trace_id=request_trace_id(request),
        )
        return _error(500, INTERNAL_ERROR)

    log.info("请求被拒绝", path=request.url.path, status_code=exc.status_code, error=exc.message)
    return _error(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    log.info("请求体校验失败", path=request.url.path, errors=exc.errors())
    return _error(400, INVALID_BODY)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error(
        "未捕获异常",
        path=request.url.path,
        error=str(exc),
        trace_id=request_trace_id(request),
        exc_info=exc,
    )
    return _error(500, INTERNAL_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TodoError, todo_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

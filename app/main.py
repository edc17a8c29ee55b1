"""
FastAPI 应用主入口
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path

# 将项目根目录添加到 python path，以便直接运行 main.py 时能找到 app 模块
sys.path.append(str(Path(__file__).resolve().parent.parent))

import structlog
from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import make_asgi_app

from app.api.errors import register_exception_handlers
from app.api.health import router as health_router
from app.api.responses import AsciiJSONResponse
from app.api.todos import router as todos_router
from app.config import Settings, get_settings
from app.observability.logging_config import setup_logging
from app.observability.metrics_middleware import MetricsMiddleware
from app.observability.request_logger import RequestLoggerMiddleware
from app.todo.service import TodoService
from app.todo.store import TodoStore

log = structlog.get_logger()


def create_app(settings: Settings | None = None, store: TodoStore | None = None) -> FastAPI:
    """按配置组装应用；测试时可注入独立的 settings / store"""
    settings = settings or get_settings()
    store = store or TodoStore(settings.TODOS_FILE)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        """应用生命周期：启动时确保存储文档存在"""
        log.info("应用启动", env=settings.ENV, app=settings.APP_NAME, todos_file=str(store.path))

        # ── Fail Fast：存储不可用时拒绝启动 ──
        await store.initialize()

        yield

        log.info("应用关闭")

    application = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
        default_response_class=AsciiJSONResponse,
    )
    application.state.todo_service = TodoService(store)

    # ── 中间件（执行顺序：从下往上注册，从上往下执行） ──
    application.add_middleware(RequestLoggerMiddleware)
    application.add_middleware(MetricsMiddleware)

    register_exception_handlers(application)

    # ── 路由注册 ──
    application.include_router(health_router)
    application.include_router(todos_router)

    # ── Prometheus 指标端点 ──
    application.mount("/metrics", make_asgi_app())

    # ── 前端页面 ──
    if settings.SERVE_STATIC and settings.STATIC_DIR.is_dir():
        index_file = settings.STATIC_DIR / "index.html"

        @application.get("/", include_in_schema=False)
        async def index() -> FileResponse:
            return FileResponse(index_file)

        application.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")

    return application


settings = get_settings()

# 初始化日志（在 import 时就生效）
setup_logging(env=settings.ENV, level=settings.LOG_LEVEL)

app = create_app(settings)


def run() -> None:
    """命令行入口：todo-server"""
    import uvicorn

    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)


if __name__ == "__main__":
    # 允许直接运行 python app/main.py 启动服务
    run()

"""
Todo 文件存储层

整个 Todo 列表保存为磁盘上的一个 JSON 数组文档：
- 每次操作都整份读取、内存中修改、整份覆盖写回，不做跨请求缓存
- 写入先落到同目录临时文件，再 os.replace 原子替换，读方永远看不到写了一半的文档
- transaction() 持有进程内互斥锁，读-改-写整段串行，避免并发请求互相覆盖（lost update）

容错策略：
- 任何读写失败都包装成 StorageError 向上抛，由 API 层统一转 500，不重试、不降级
"""

import asyncio
import json
import os
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from pydantic import ValidationError as PydanticValidationError

from app.observability.metrics import STORE_ERROR_TOTAL, TODO_ITEMS
from app.todo.exceptions import StorageError
from app.todo.schemas import Todo

log = structlog.get_logger()


class TodoStore:
    """单文档 JSON 存储，独占磁盘上的 Todo 列表"""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["TodoStore"]:
        """临界区：块内的 read_all → 修改 → write_all 不会与其他请求交错"""
        async with self._lock:
            yield self

    async def initialize(self) -> None:
        """文档不存在时创建空数组，已存在则不动（每次启动都可以安全调用）"""
        try:
            created = await asyncio.to_thread(self._init_sync)
        except OSError as e:
            STORE_ERROR_TOTAL.labels(op="init").inc()
            log.error("Todo 存储初始化失败", path=str(self.path), error=str(e), exc_info=True)
            raise StorageError("Failed to initialize todo storage", cause=e) from e

        if created:
            log.info("Todo 存储文档不存在，已创建空列表", path=str(self.path))

    async def read_all(self) -> list[Todo]:
        """整份读取并解析，文档缺失或内容不合法时抛 StorageError"""
        try:
            todos = await asyncio.to_thread(self._read_sync)
        except StorageError as e:
            STORE_ERROR_TOTAL.labels(op="read").inc()
            log.error("Todo 存储读取失败", path=str(self.path), error=e.message, cause=repr(e.cause))
            raise
        TODO_ITEMS.set(len(todos))
        return todos

    async def write_all(self, todos: list[Todo]) -> None:
        """整份序列化并原子替换文档（非 ASCII 字符转义为 \\uXXXX，孤立代理项也能原样往返）"""
        payload = json.dumps(
            [t.to_json_dict() for t in todos],
            indent=2,
        )
        try:
            await asyncio.to_thread(self._write_sync, payload)
        except (OSError, UnicodeError) as e:
            STORE_ERROR_TOTAL.labels(op="write").inc()
            log.error("Todo 存储写入失败", path=str(self.path), error=str(e), exc_info=True)
            raise StorageError("Failed to write todo storage", cause=e) from e
        TODO_ITEMS.set(len(todos))

    # ── 同步实现（在线程池中执行，不阻塞事件循环） ──

    def _init_sync(self) -> bool:
        if self.path.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write_sync("[]")
        return True

    def _read_sync(self) -> list[Todo]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise StorageError("Todo storage document is missing", cause=e) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError("Failed to read todo storage", cause=e) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError("Todo storage document is not valid JSON", cause=e) from e

        if not isinstance(data, list):
            raise StorageError("Todo storage document must be a JSON array")

        try:
            todos = [Todo.model_validate(item) for item in data]
        except PydanticValidationError as e:
            raise StorageError("Todo storage document holds an invalid todo", cause=e) from e

        if len({t.id for t in todos}) != len(todos):
            raise StorageError("Todo storage document holds duplicate ids")
        return todos

    def _write_sync(self, payload: str) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            # 替换失败时清理临时文件，原文档保持不变
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

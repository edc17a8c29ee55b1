"""
控制台交互客户端：通过 HTTP API 操作 Todo 列表（与浏览器页面走同一套接口）

运行方式：
    python scripts/todo_console.py
    python scripts/todo_console.py --url http://127.0.0.1:3000

支持命令：
    /list              — 列出全部
    /add <text>        — 新建（直接输入非命令文本等同于 /add）
    /toggle <id>       — 切换完成状态
    /edit <id> <text>  — 修改文本
    /delete <id>       — 删除
    /quit              — 退出
"""

import argparse
import asyncio
import sys
from pathlib import Path

import httpx
from prompt_toolkit import PromptSession

# 确保项目根目录在 sys.path 中
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.config import get_settings

HELP = "命令: /list | /add <text> | /toggle <id> | /edit <id> <text> | /delete <id> | /quit"


class TodoApiError(Exception):
    """API 返回非 2xx，message 取自响应体的 error 字段"""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"[{status_code}] {message}")
        self.status_code = status_code
        self.message = message


class TodoClient:
    """/api/todos 的异步 HTTP 客户端"""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def _call(self, method: str, path: str, **kwargs) -> dict | list:
        response = await self.http.request(method, f"/api/todos{path}", **kwargs)
        if response.is_error:
            try:
                message = response.json().get("error", response.text)
            except ValueError:
                message = response.text
            raise TodoApiError(response.status_code, message)
        return response.json()

    async def list(self) -> list[dict]:
        return await self._call("GET", "")

    async def add(self, text: str) -> dict:
        return await self._call("POST", "", json={"text": text})

    async def toggle(self, todo_id: str) -> dict:
        return await self._call("PUT", f"/{todo_id}")

    async def edit(self, todo_id: str, text: str) -> dict:
        return await self._call("PATCH", f"/{todo_id}", json={"text": text})

    async def delete(self, todo_id: str) -> dict:
        return await self._call("DELETE", f"/{todo_id}")


def format_todo(todo: dict) -> str:
    mark = "x" if todo["completed"] else " "
    return f"[{mark}] {todo['id']}  {todo['text']}"


def format_list(todos: list[dict]) -> str:
    if not todos:
        return "（空列表）"
    done = sum(1 for t in todos if t["completed"])
    lines = [format_todo(t) for t in todos]
    lines.append(f"Total: {len(todos)} | Completed: {done}")
    return "\n".join(lines)


async def handle_command(client: TodoClient, line: str) -> str:
    """执行一行输入，返回要打印的文本；API 错误以 TodoApiError 抛出"""
    if not line.startswith("/"):
        return format_todo(await client.add(line))

    command, _, rest = line.partition(" ")
    rest = rest.strip()

    if command == "/list":
        return format_list(await client.list())
    if command in ("/add", "/toggle", "/edit", "/delete") and not rest:
        return HELP
    if command == "/add":
        return format_todo(await client.add(rest))
    if command == "/toggle":
        return format_todo(await client.toggle(rest))
    if command == "/edit":
        todo_id, _, text = rest.partition(" ")
        return format_todo(await client.edit(todo_id, text))
    if command == "/delete":
        return (await client.delete(rest))["message"]
    return HELP


async def main(base_url: str):
    """交互主循环"""
    print("=" * 60)
    print("  Todo 控制台")
    print(f"  服务地址: {base_url}")
    print(f"  {HELP}")
    print("=" * 60)

    pt_session = PromptSession()

    async with httpx.AsyncClient(base_url=base_url, timeout=10) as http:
        client = TodoClient(http)

        while True:
            try:
                user_input = (await pt_session.prompt_async("todo> ")).strip()
            except (EOFError, KeyboardInterrupt):
                print("\n再见！")
                break

            if not user_input:
                continue

            if user_input == "/quit":
                print("再见！")
                break

            try:
                print(await handle_command(client, user_input))
            except TodoApiError as e:
                print(f"\033[31m错误: {e.message}\033[0m")
            except httpx.HTTPError as e:
                print(f"\033[31m连接失败: {e}\033[0m")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Todo 控制台客户端")
    parser.add_argument("--url", default=f"http://127.0.0.1:{get_settings().APP_PORT}")
    args = parser.parse_args()
    asyncio.run(main(args.url))

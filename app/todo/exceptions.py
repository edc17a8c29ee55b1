"""
Todo 业务异常

每个异常自带 HTTP 状态码和可以直接返回给调用方的 message，
由 app.api.errors 统一转换为 {"error": message} 响应体。
"""


class TodoError(Exception):
    """Todo 模块异常基类"""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TodoError):
    """输入不合法（空文本、非整数 id 等）→ 400"""

    status_code = 400


class NotFoundError(TodoError):
    """目标 id 不存在 → 404"""

    status_code = 404


class StorageError(TodoError):
    """存储文档不可读/不可写 → 500，cause 只进日志不回给调用方"""

    status_code = 500

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

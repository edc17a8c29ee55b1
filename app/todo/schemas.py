"""
Todo 数据模型

Todo 落盘和返回给前端使用同一份 JSON 形状：
{"id": int, "text": str, "completed": bool, "createdAt": ISO-8601 str}
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator


def utc_now_iso() -> str:
    """当前 UTC 时间，毫秒精度，Z 结尾（与浏览器 toISOString 一致）"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class Todo(BaseModel):
    """单个 Todo 条目"""

    model_config = ConfigDict(populate_by_name=True)

    id: StrictInt
    text: str
    completed: StrictBool = False
    created_at: str = Field(alias="createdAt")

    @field_validator("text")
    @classmethod
    def _check_text(cls, v: str) -> str:
        """文本必须非空且已去除首尾空白"""
        if not v or v != v.strip():
            raise ValueError("text 必须是去除首尾空白后的非空字符串")
        return v

    @field_validator("created_at")
    @classmethod
    def _check_created_at(cls, v: str) -> str:
        datetime.fromisoformat(v)  # 非 ISO-8601 时抛 ValueError
        return v

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class TodoTextIn(BaseModel):
    """创建 / 修改文本的请求体，text 的非空校验在 service 层做（需要返回 400 而非 422）"""

    text: str | None = None


class MessageOut(BaseModel):
    message: str


class ErrorOut(BaseModel):
    error: str

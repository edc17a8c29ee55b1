"""
全局配置模块：通过 pydantic-settings 读取 .env 环境变量
"""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = APP_DIR.parent


class Settings(BaseSettings):
    """应用全局配置，从 .env 文件加载"""

    model_config = SettingsConfigDict(
        env_file=APP_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── 存储 ──
    TODOS_FILE: Path = PROJECT_ROOT / "todos.json"  # 整个 Todo 列表存放在这一个 JSON 文档里

    # ── 前端静态页面 ──
    STATIC_DIR: Path = APP_DIR / "static"
    SERVE_STATIC: bool = True

    # ── 日志 ──
    LOG_LEVEL: str = "INFO"

    # ── 应用 ──
    ENV: str = "development"  # development | production
    APP_NAME: str = "flat-todo"
    APP_HOST: str = "0.0.0.0"
    # 兼容 PORT（部署平台常用的端口变量）
    APP_PORT: int = Field(default=3000, validation_alias=AliasChoices("APP_PORT", "PORT"))

    @field_validator("APP_PORT")
    @classmethod
    def _check_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"端口号必须在 1-65535 之间，当前值：{v}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper()


@lru_cache
def get_settings() -> Settings:
    """单例获取配置（带缓存）"""
    return Settings()

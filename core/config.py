"""
配置文件 - 项目配置管理
"""
import json
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseModel):
    url: Optional[str] = None
    max_connections: int = 10
    namespace: str = "cs2stats"


class DatabaseSettings(BaseModel):
    url: str = "sqlite+aiosqlite:///./cs2stats.db"
    echo: bool = False


class SmtpSettings(BaseModel):
    """出站邮件（比赛事件通知）"""
    host: Optional[str] = None
    port: int = 587
    user: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    from_address: Optional[str] = None
    timeout: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password)


class CelerySettings(BaseModel):
    broker_url: Optional[str] = None
    result_backend: Optional[str] = None
    # 测试/单进程部署下直接在调用线程执行任务
    task_always_eager: bool = False


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = "CS2Stats"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api"

    # 分组配置：Redis/Database/SMTP/Celery 采用嵌套模型
    redis: RedisSettings = Field(default_factory=RedisSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)
    celery: CelerySettings = Field(default_factory=CelerySettings)

    # 安全配置
    SECRET_KEY: Optional[str] = Field(
        default=None,
        description="JWT签名密钥，生产环境必须设置",
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS配置
    CORS_ORIGINS: list = Field(
        default=["http://localhost:3000", "http://localhost:5000", "http://localhost:8000"],
    )

    # 列表默认条数
    DEFAULT_LIST_LIMIT: int = 20
    MAX_LIST_LIMIT: int = 100
    MATCH_EVENTS_DEFAULT_LIMIT: int = 100
    MATCH_EVENTS_MAX_LIMIT: int = 500

    # 日志/请求体记录配置
    LOG_REQUEST_BODY_ENABLE_BY_DEFAULT: bool = True
    LOG_REQUEST_BODY_MAX_BYTES: int = 2048

    # Realtime/WebSocket 配置
    REALTIME_BROKER: str = Field(
        default="auto",
        description="广播中转: auto | inmemory | redis",
    )
    REALTIME_WS_SEND_QUEUE_MAX: int = 100
    REALTIME_WS_SEND_OVERFLOW_POLICY: str = Field(
        default="drop_oldest",
        description="队列溢出策略: drop_oldest | drop_new | disconnect",
    )
    REALTIME_WS_IDLE_PING_INTERVAL_S: float = 30.0
    REALTIME_WS_PONG_GRACE_S: float = 10.0
    REALTIME_WS_MISSED_PING_LIMIT: int = 2
    REALTIME_WS_COMMANDS_REQUIRE_ADMIN: bool = True
    REALTIME_WELCOME_MESSAGE: str = "Welcome to CS2Stats WebSocket"

    # 比赛事件通知收件人（逗号分隔）
    NOTIFY_EMAILS: str = ""

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @property
    def notify_recipients(self) -> list[str]:
        return [item.strip() for item in self.NOTIFY_EMAILS.split(",") if item.strip()]

    @model_validator(mode="after")
    def _validate_secret_key(self):
        # 所有环境均要求显式配置 SECRET_KEY，避免重启导致 Token 失效
        if not self.SECRET_KEY:
            raise ValueError("SECRET_KEY 未配置。请在环境变量或 .env 中设置 SECRET_KEY")
        return self

    @field_validator("REALTIME_WS_SEND_OVERFLOW_POLICY")
    @classmethod
    def _check_overflow_policy(cls, v: str) -> str:
        v = (v or "").lower()
        if v not in {"drop_oldest", "drop_new", "disconnect"}:
            raise ValueError("REALTIME_WS_SEND_OVERFLOW_POLICY must be drop_oldest, drop_new or disconnect")
        return v

    @field_validator("REALTIME_BROKER")
    @classmethod
    def _check_broker(cls, v: str) -> str:
        v = (v or "auto").lower()
        if v not in {"auto", "inmemory", "redis"}:
            raise ValueError("REALTIME_BROKER must be auto, inmemory or redis")
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """允许 JSON 字符串或逗号分隔字符串两种格式。"""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                try:
                    arr = json.loads(s)
                except json.JSONDecodeError:
                    arr = None
                if isinstance(arr, list):
                    return arr
            if "," in s:
                return [item.strip() for item in s.split(",") if item.strip()]
            return [s]
        return v


settings = Settings()

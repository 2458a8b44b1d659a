"""
Structlog 日志配置

structlog 与标准库 logging 共用一条处理链：uvicorn/sqlalchemy/celery 的日志
与业务日志输出格式一致，均带上 request_id 等上下文字段。
"""
import json
import logging
from typing import Any, List

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import ProcessorFormatter

from core.config import settings

# 第三方库默认日志过于冗长，统一收敛
_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "websockets": logging.INFO,
    "httpx": logging.WARNING,
    "celery": logging.INFO,
}


def _add_environment(logger: Any, method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("env", settings.ENVIRONMENT)
    return event_dict


def _shared_processors() -> List[Any]:
    return [
        merge_contextvars,
        add_log_level,
        structlog.stdlib.add_logger_name,
        _add_environment,
        TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def get_renderer() -> Any:
    """DEBUG 下输出便于阅读的控制台格式，其余环境输出单行 JSON"""
    if settings.DEBUG:
        return ConsoleRenderer(colors=False)
    # structlog 会透传 default 等关键字参数
    return JSONRenderer(serializer=lambda obj, **kw: json.dumps(obj, ensure_ascii=False, **kw))


def configure_logging() -> None:
    chain = _shared_processors()
    structlog.configure(
        processors=[*chain, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[ProcessorFormatter.remove_processors_meta, get_renderer()],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


configure_logging()

"""
访问日志中间件

每个 HTTP 请求在结束时输出一条结构化日志（状态码、耗时）。写操作
（POST/PATCH/PUT/DELETE）会同时触发实时广播，额外标记 mutation=true，
便于把访问日志与 realtime_broadcast_* 日志对照排查。
WebSocket 连接由 /ws 路由自行记录。
"""
import json
import time
from typing import Any, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.config import settings
from core.logging_config import get_logger

logger = get_logger(__name__)

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class LoggingMiddleware(BaseHTTPMiddleware):
    SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}
    SENSITIVE_FIELDS = {"password", "token", "secret", "api_key", "access_token", "authorization"}

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.body_log_default: bool = settings.LOG_REQUEST_BODY_ENABLE_BY_DEFAULT
        self.body_log_max_bytes: int = settings.LOG_REQUEST_BODY_MAX_BYTES

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        context = await self._request_context(request)
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration_ms=_elapsed_ms(started),
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
                **context,
            )
            raise

        duration_ms = _elapsed_ms(started)
        self._log_completed(response, duration_ms, context)
        response.headers["X-Process-Time"] = f"{duration_ms / 1000:.3f}"
        return response

    async def _request_context(self, request: Request) -> dict:
        context: dict = {}
        if request.query_params:
            context["query_params"] = dict(request.query_params)
        if request.method in MUTATING_METHODS:
            context["mutation"] = True
            if request.method != "DELETE" and self._body_logging_enabled(request):
                body = await self._read_body(request)
                if body is not None:
                    context["body"] = body
        return context

    def _body_logging_enabled(self, request: Request) -> bool:
        # X-Log-Body: true/false 覆盖默认开关
        header = (request.headers.get("X-Log-Body") or "").lower()
        if header in {"true", "1", "yes"}:
            return True
        if header in {"false", "0", "no"}:
            return False
        return self.body_log_default and settings.DEBUG

    async def _read_body(self, request: Request) -> Optional[Any]:
        raw = await request.body()
        if not raw:
            return None
        snippet = raw[: self.body_log_max_bytes].decode("utf-8", errors="ignore")
        if "application/json" not in request.headers.get("content-type", "").lower():
            return snippet
        try:
            return self._mask(json.loads(snippet))
        except ValueError:
            # 截断后的 JSON 无法解析，按文本记录
            return snippet

    def _mask(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: "***" if k.lower() in self.SENSITIVE_FIELDS else self._mask(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._mask(item) for item in data]
        return data

    def _log_completed(self, response: Response, duration_ms: float, context: dict) -> None:
        status_code = response.status_code
        if status_code >= 500:
            log = logger.error
        elif status_code >= 400:
            log = logger.warning
        else:
            log = logger.info
        log("request_completed", status_code=status_code, duration_ms=duration_ms, **context)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)

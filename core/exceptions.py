"""
异常到 HTTP 响应的映射与全局异常处理器

业务码按区段映射 HTTP 状态（1xxxx→400、2xxxx→400/404、3xxxx→401/403、4xxxx→500），
少数业务码单独指定。实时通道不经过这里：WebSocket 命令的错误以
``*:error`` 信封点对点回给发送方。
"""
import traceback
import uuid
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status as http_status

from core.logging_config import get_logger
from domain.common.exceptions import BusinessException, EntityNotFoundException
from shared.codes import BusinessCode

from .response import error_response

logger = get_logger(__name__)


class UnauthorizedException(BusinessException):
    """缺少或无效的 Bearer 令牌"""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(code=BusinessCode.UNAUTHORIZED, message=message, error_type="Unauthorized")


class TokenExpiredException(BusinessException):
    def __init__(self):
        super().__init__(code=BusinessCode.TOKEN_EXPIRED, message="Token expired", error_type="TokenExpired")


_STATUS_OVERRIDES = {
    BusinessCode.PARAM_VALIDATION_ERROR: http_status.HTTP_422_UNPROCESSABLE_ENTITY,
    BusinessCode.NOT_FOUND: http_status.HTTP_404_NOT_FOUND,
    BusinessCode.TOKEN_INVALID: http_status.HTTP_401_UNAUTHORIZED,
    BusinessCode.TOKEN_EXPIRED: http_status.HTTP_401_UNAUTHORIZED,
    BusinessCode.UNAUTHORIZED: http_status.HTTP_401_UNAUTHORIZED,
    BusinessCode.SERVICE_UNAVAILABLE: http_status.HTTP_503_SERVICE_UNAVAILABLE,
}

_STATUS_BY_RANGE = {
    1: http_status.HTTP_400_BAD_REQUEST,
    2: http_status.HTTP_400_BAD_REQUEST,
    3: http_status.HTTP_403_FORBIDDEN,
    4: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# HTTPException 状态码 -> 业务码
_CODE_BY_HTTP_STATUS = {
    401: BusinessCode.UNAUTHORIZED,
    403: BusinessCode.FORBIDDEN,
    404: BusinessCode.NOT_FOUND,
    503: BusinessCode.SERVICE_UNAVAILABLE,
}


def business_code_to_http_status(code: int, exc: Optional[BusinessException] = None) -> int:
    """根据业务码映射 HTTP 状态码（默认 400）"""
    if isinstance(exc, EntityNotFoundException):
        return http_status.HTTP_404_NOT_FOUND
    if code in _STATUS_OVERRIDES:
        return _STATUS_OVERRIDES[code]
    return _STATUS_BY_RANGE.get(code // 10000, http_status.HTTP_400_BAD_REQUEST)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _json(status_code: int, payload, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"), headers=headers)


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        status_code = business_code_to_http_status(exc.code, exc)
        if status_code >= 500:
            logger.error("business_exception", error_type=exc.error_type, message=exc.message)
        payload = error_response(
            code=exc.code,
            message=exc.message,
            error_type=exc.error_type,
            details=exc.details,
            field=exc.field,
            request_id=_request_id(request),
        )
        headers = {"WWW-Authenticate": "Bearer"} if status_code == http_status.HTTP_401_UNAUTHORIZED else None
        return _json(status_code, payload, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # ctx 中可能包含异常对象，只保留可序列化的字段
        errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", [])[1:])
        payload = error_response(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=f"Validation failed: {first.get('msg', 'unknown')}",
            error_type="ValidationError",
            details={"errors": errors},
            field=field or None,
            request_id=_request_id(request),
        )
        return _json(http_status.HTTP_422_UNPROCESSABLE_ENTITY, payload)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        payload = error_response(
            code=_CODE_BY_HTTP_STATUS.get(exc.status_code, BusinessCode.SYSTEM_ERROR),
            message=str(exc.detail),
            error_type="HTTPError",
            details={"status_code": exc.status_code},
            request_id=_request_id(request),
        )
        return _json(exc.status_code, payload, getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        request_id = _request_id(request)
        logger.error("unhandled_exception", request_id=request_id, error=str(exc), exc_info=True)
        details = {"exception": str(exc), "traceback": traceback.format_exc()} if app.debug else None
        payload = error_response(
            code=BusinessCode.SYSTEM_ERROR,
            message="Internal server error",
            error_type="SystemError",
            details=details,
            request_id=request_id,
        )
        return _json(http_status.HTTP_500_INTERNAL_SERVER_ERROR, payload)

"""
统一响应格式

REST 响应统一为 {code, message, data, error}；时间字段一律输出 UTC 且以 Z 结尾，
与 WebSocket 广播中的记录格式保持一致。
"""
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_serializer

from shared.codes import BusinessCode

DataT = TypeVar("DataT")


def to_utc_z(ts: datetime) -> str:
    """无时区的时间按 UTC 处理"""
    ts = ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts.astimezone(timezone.utc)
    return ts.isoformat().replace("+00:00", "Z")


class ErrorDetail(BaseModel):
    type: str
    details: Optional[dict] = None
    field: Optional[str] = None
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer("timestamp")
    def _timestamp_z(self, value: datetime) -> str:
        return to_utc_z(value)


class Response(BaseModel, Generic[DataT]):
    """统一响应模型；路由以 Response[XxxDTO] 声明 response_model"""
    code: int
    message: str
    data: Optional[DataT] = None
    error: Optional[ErrorDetail] = None


def success_response(data: Any = None, message: str = "Success", code: int = BusinessCode.SUCCESS) -> Response:
    return Response(code=code, message=message, data=data)


def error_response(
    code: int,
    message: str,
    error_type: str = "BusinessError",
    details: Optional[dict] = None,
    field: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Response:
    """
    构建错误响应（由全局异常处理器调用）

    Args:
        code: BusinessCode 业务码
        error_type: 错误类型，如 TeamNotFound、ValidationError
        details: 附加信息，如未找到的资源 id
    """
    detail = ErrorDetail(type=error_type, details=details, field=field, request_id=request_id)
    return Response(code=code, message=message, error=detail)

"""
Shared business codes used across layers (Domain/Core/API).

Single source of truth for the integer codes carried in the unified
response envelope.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """业务状态码定义（单一来源）"""

    # 成功
    SUCCESS = 0

    # 参数错误 (1xxxx)
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_VALIDATION_ERROR = 10003

    # 业务错误 (2xxxx)
    BUSINESS_ERROR = 20000
    USER_NOT_FOUND = 20001
    TOKEN_INVALID = 20004
    TOKEN_EXPIRED = 20005
    NOT_FOUND = 20006  # 资源未找到（通用）
    TEAM_NOT_FOUND = 20101
    PLAYER_NOT_FOUND = 20102
    MATCH_NOT_FOUND = 20103
    ARTICLE_NOT_FOUND = 20104
    COMMENT_NOT_FOUND = 20105
    FAVORITE_NOT_FOUND = 20106

    # 权限错误 (3xxxx)
    PERMISSION_ERROR = 30000
    UNAUTHORIZED = 30001
    FORBIDDEN = 30002

    # 系统错误 (4xxxx)
    SYSTEM_ERROR = 40000
    DATABASE_ERROR = 40001
    SERVICE_UNAVAILABLE = 40003


__all__ = ["BusinessCode"]

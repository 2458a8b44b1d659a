"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional

from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class EntityNotFoundException(BusinessException):
    """按 id 查找资源失败的通用异常，子类只需指定 code 与资源名。"""

    resource = "Resource"
    not_found_code: int = BusinessCode.NOT_FOUND

    def __init__(self, entity_id: Optional[str] = None):
        details = {"id": entity_id} if entity_id else None
        super().__init__(
            code=self.not_found_code,
            message=f"{self.resource} not found",
            error_type=f"{self.resource.replace(' ', '')}NotFound",
            details=details,
        )


class UserNotFoundException(EntityNotFoundException):
    resource = "User"
    not_found_code = BusinessCode.USER_NOT_FOUND


class TeamNotFoundException(EntityNotFoundException):
    resource = "Team"
    not_found_code = BusinessCode.TEAM_NOT_FOUND


class PlayerNotFoundException(EntityNotFoundException):
    resource = "Player"
    not_found_code = BusinessCode.PLAYER_NOT_FOUND


class MatchNotFoundException(EntityNotFoundException):
    resource = "Match"
    not_found_code = BusinessCode.MATCH_NOT_FOUND


class ArticleNotFoundException(EntityNotFoundException):
    resource = "Article"
    not_found_code = BusinessCode.ARTICLE_NOT_FOUND


class CommentNotFoundException(EntityNotFoundException):
    resource = "Comment"
    not_found_code = BusinessCode.COMMENT_NOT_FOUND


class FavoriteNotFoundException(EntityNotFoundException):
    resource = "Favorite"
    not_found_code = BusinessCode.FAVORITE_NOT_FOUND


class PermissionDeniedException(BusinessException):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            code=BusinessCode.FORBIDDEN,
            message=message,
            error_type="PermissionDenied",
        )


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )

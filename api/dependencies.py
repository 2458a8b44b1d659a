"""
API依赖项 - 服务装配、认证和授权
"""
from typing import Optional

from fastapi import Depends, Request, WebSocket
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from application.services.content_service import (
    CommentApplicationService,
    FavoriteApplicationService,
    NewsApplicationService,
)
from application.services.match_service import MatchApplicationService
from application.services.realtime_service import RealtimeService
from application.services.team_service import PlayerApplicationService, TeamApplicationService
from application.services.token_service import TokenService
from application.services.user_service import UserApplicationService
from core.exceptions import UnauthorizedException
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException, PermissionDeniedException
from domain.user.entity import User
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork

logger = get_logger(__name__)

# HTTP Bearer for direct API calls
http_bearer = HTTPBearer(
    scheme_name="Bearer",
    description="JWT Bearer token authentication",
    auto_error=False,
)


def get_uow_factory():
    return SQLAlchemyUnitOfWork


async def get_token_service() -> TokenService:
    return TokenService()


async def get_user_service(uow_factory=Depends(get_uow_factory)) -> UserApplicationService:
    return UserApplicationService(uow_factory=uow_factory)


async def get_team_service(uow_factory=Depends(get_uow_factory)) -> TeamApplicationService:
    return TeamApplicationService(uow_factory=uow_factory)


async def get_player_service(uow_factory=Depends(get_uow_factory)) -> PlayerApplicationService:
    return PlayerApplicationService(uow_factory=uow_factory)


async def get_match_service(uow_factory=Depends(get_uow_factory)) -> MatchApplicationService:
    return MatchApplicationService(uow_factory=uow_factory)


async def get_news_service(uow_factory=Depends(get_uow_factory)) -> NewsApplicationService:
    return NewsApplicationService(uow_factory=uow_factory)


async def get_comment_service(uow_factory=Depends(get_uow_factory)) -> CommentApplicationService:
    return CommentApplicationService(uow_factory=uow_factory)


async def get_favorite_service(uow_factory=Depends(get_uow_factory)) -> FavoriteApplicationService:
    return FavoriteApplicationService(uow_factory=uow_factory)


def get_realtime_service(request: Request) -> RealtimeService:
    svc = getattr(request.app.state, "realtime_service", None)
    if svc is None:
        raise RuntimeError("Realtime service not initialized. Ensure lifespan sets app.state.realtime_service.")
    return svc


async def _resolve_user(token: str, token_service: TokenService, user_service: UserApplicationService) -> Optional[User]:
    user_id = token_service.verify_access_token(token)
    if user_id is None:
        return None
    return await user_service.get_user_entity(user_id)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    token_service: TokenService = Depends(get_token_service),
    user_service: UserApplicationService = Depends(get_user_service),
) -> User:
    """获取当前登录用户（角色以数据库为准）"""
    if not credentials or not credentials.credentials:
        raise UnauthorizedException("Unauthorized")
    user = await _resolve_user(credentials.credentials, token_service, user_service)
    if user is None:
        raise UnauthorizedException("Invalid authentication credentials")
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """获取当前管理员用户"""
    if not current_user.is_admin:
        raise PermissionDeniedException("Forbidden: admin role required")
    return current_user


def extract_ws_token(ws: WebSocket) -> Optional[str]:
    # Prefer query param, fallback to header `Authorization: Bearer x`
    token = ws.query_params.get("token")
    if token:
        return token
    auth = ws.headers.get("authorization") or ""
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return None


async def get_ws_user(ws: WebSocket) -> Optional[User]:
    """WebSocket 连接的可选身份：观众无需登录，命令权限在服务层判断"""
    token = extract_ws_token(ws)
    if not token:
        return None
    try:
        return await _resolve_user(token, TokenService(), UserApplicationService(uow_factory=SQLAlchemyUnitOfWork))
    except BusinessException as exc:
        logger.info("ws_token_rejected", error=exc.message)
        return None

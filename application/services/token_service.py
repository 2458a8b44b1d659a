"""
令牌服务 - 签发与校验访问令牌（JWT）
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from core.config import settings
from core.exceptions import TokenExpiredException
from core.logging_config import get_logger
from domain.user.entity import User


logger = get_logger(__name__)


class TokenService:
    """无状态访问令牌：sub=用户ID，role 仅作参考，权限以数据库为准"""

    def create_access_token(self, user: User, expires_minutes: Optional[int] = None) -> str:
        """创建访问令牌"""
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
        to_encode = {
            "sub": str(user.id),
            "role": user.role.value,
            "exp": expire,
            "type": "access",
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    def verify_access_token(self, token: str) -> Optional[str]:
        """验证访问令牌，返回用户ID；过期抛出 TokenExpiredException，其余无效情况返回 None"""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise TokenExpiredException()
        except jwt.PyJWTError as exc:
            logger.debug("access_token_invalid", error=str(exc))
            return None
        if payload.get("type") != "access":
            return None
        sub = payload.get("sub")
        return str(sub) if sub else None

"""
用户领域实体 - 包含核心业务规则
"""
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from domain.common.entity import EntityMixin

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


class UserRole(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


@dataclass
class User(EntityMixin):
    """用户实体 - 登录由外部身份提供方完成，这里只保留资料与角色"""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: UserRole = UserRole.USER
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.role = UserRole(self.role)
        self.validate()

    def validate(self) -> None:
        """业务规则：邮箱格式验证"""
        if not self.id:
            raise ValueError("用户ID不能为空")
        if self.email and not _EMAIL_PATTERN.match(self.email):
            raise ValueError(f"无效的邮箱格式: {self.email}")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def can_moderate(self) -> bool:
        """管理员与版主均可处理他人内容"""
        return self.role in (UserRole.ADMIN, UserRole.MODERATOR)

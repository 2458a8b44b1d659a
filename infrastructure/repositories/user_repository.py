"""
用户仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import Optional

from sqlalchemy import select

from domain.common.exceptions import UserNotFoundException
from domain.user.entity import User
from domain.user.repository import UserRepository
from infrastructure.models.user import UserModel

from .base import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User, UserModel], UserRepository):
    """用户仓储的SQLAlchemy实现"""

    entity_cls = User
    model_cls = UserModel
    not_found_exc = UserNotFoundException

    async def get_by_email(self, email: str) -> Optional[User]:
        """根据邮箱获取用户"""
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

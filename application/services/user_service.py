"""
用户应用服务 - 外部身份登录后的资料同步与查询
"""
from typing import Callable, Optional

from domain.common.exceptions import DomainValidationException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.user.entity import User, UserRole

from .common import domain_rules


class UserApplicationService:
    """用户应用服务 - 处理应用层逻辑"""

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def get_user_entity(self, user_id: str) -> Optional[User]:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.user_repository.get_by_id(user_id)

    async def upsert_user(
        self,
        user_id: str,
        *,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> User:
        """按 id 创建或更新用户资料（身份提供方回调与运维脚本使用）"""
        changes = {
            k: v
            for k, v in {"email": email, "first_name": first_name, "last_name": last_name, "role": role}.items()
            if v is not None
        }
        async with self._uow_factory() as uow:
            if email:
                owner = await uow.user_repository.get_by_email(email)
                if owner is not None and owner.id != user_id:
                    raise DomainValidationException("Email already in use", field="email")
            existing = await uow.user_repository.get_by_id(user_id)
            with domain_rules():
                if existing is None:
                    return await uow.user_repository.create(User(id=user_id, **changes))
                existing.apply_changes(changes)
                existing.role = UserRole(existing.role)
            return await uow.user_repository.update(existing)

"""
仓储实现公共部分 - 领域实体与 ORM 模型之间的映射
"""
from dataclasses import fields
from enum import Enum
from typing import Any, ClassVar, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.exceptions import EntityNotFoundException
from infrastructure.models import Base

E = TypeVar("E")
M = TypeVar("M", bound=Base)

# 由数据库维护的列，实体上为 None 时不写入
_DB_MANAGED = ("id", "created_at", "updated_at")


class SQLAlchemyRepository(Generic[E, M]):
    """按 dataclass 字段名与 ORM 列属性一一映射的仓储基类"""

    entity_cls: ClassVar[type]
    model_cls: ClassVar[Type[Base]]
    # 实体字段名 -> 模型属性名（仅在两者不同时声明）
    field_map: ClassVar[Dict[str, str]] = {}
    not_found_exc: ClassVar[Type[EntityNotFoundException]] = EntityNotFoundException

    def __init__(self, session: AsyncSession):
        self.session = session

    def _attr(self, field_name: str) -> str:
        return self.field_map.get(field_name, field_name)

    def _to_entity(self, model: M) -> E:
        """将数据库模型转换为领域实体"""
        values = {f.name: getattr(model, self._attr(f.name)) for f in fields(self.entity_cls)}
        return self.entity_cls(**values)

    def _column_values(self, entity: E) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for f in fields(self.entity_cls):
            value = getattr(entity, f.name)
            if value is None and f.name in _DB_MANAGED:
                continue
            if isinstance(value, Enum):
                value = value.value
            values[self._attr(f.name)] = value
        return values

    def _to_model(self, entity: E) -> M:
        """将领域实体转换为数据库模型"""
        return self.model_cls(**self._column_values(entity))

    async def _get_model(self, entity_id: str) -> Optional[M]:
        result = await self.session.execute(
            select(self.model_cls).where(self.model_cls.id == entity_id)
        )
        return result.scalar_one_or_none()

    async def create(self, entity: E) -> E:
        db_obj = self._to_model(entity)
        self.session.add(db_obj)
        await self.session.flush()  # 获取生成的ID与默认值
        await self.session.refresh(db_obj)
        return self._to_entity(db_obj)

    async def get_by_id(self, entity_id: str) -> Optional[E]:
        db_obj = await self._get_model(entity_id)
        return self._to_entity(db_obj) if db_obj else None

    async def update(self, entity: E) -> E:
        db_obj = await self._get_model(getattr(entity, "id"))
        if db_obj is None:
            raise self.not_found_exc(getattr(entity, "id"))
        for attr, value in self._column_values(entity).items():
            if attr not in ("id", "created_at"):
                setattr(db_obj, attr, value)
        await self.session.flush()
        await self.session.refresh(db_obj)
        return self._to_entity(db_obj)

    async def delete(self, entity_id: str) -> bool:
        db_obj = await self._get_model(entity_id)
        if db_obj is None:
            return False
        await self.session.delete(db_obj)
        await self.session.flush()
        return True

"""
仓储接口公共部分 - 按 id 增删改查
"""
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

E = TypeVar("E")


class Repository(ABC, Generic[E]):
    """聚合仓储抽象接口"""

    @abstractmethod
    async def create(self, entity: E) -> E:
        """持久化新实体，返回带 id 与时间戳的实体"""

    @abstractmethod
    async def get_by_id(self, entity_id: str) -> Optional[E]:
        """根据ID获取实体"""

    @abstractmethod
    async def update(self, entity: E) -> E:
        """更新实体"""

    @abstractmethod
    async def delete(self, entity_id: str) -> bool:
        """删除实体，不存在时返回 False"""

"""
战队仓储接口
"""
from abc import abstractmethod
from typing import List

from domain.common.repository import Repository

from .entity import Team


class TeamRepository(Repository[Team]):

    @abstractmethod
    async def list(self, limit: int = 50, offset: int = 0) -> List[Team]:
        """按排名获取战队列表"""

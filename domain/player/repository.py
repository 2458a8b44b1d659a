"""
选手仓储接口
"""
from abc import abstractmethod
from typing import List, Optional

from domain.common.repository import Repository

from .entity import Player


class PlayerRepository(Repository[Player]):

    @abstractmethod
    async def list(self, team_id: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[Player]:
        """获取选手列表，可按战队过滤"""

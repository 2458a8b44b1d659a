"""
收藏仓储接口
"""
from abc import abstractmethod
from typing import List

from domain.common.repository import Repository

from .entity import Favorite


class FavoriteRepository(Repository[Favorite]):

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Favorite]:
        ...

"""
新闻仓储接口
"""
from abc import abstractmethod
from typing import List, Optional

from domain.common.repository import Repository

from .entity import NewsArticle


class NewsRepository(Repository[NewsArticle]):

    @abstractmethod
    async def list(self, published: Optional[bool] = None, limit: int = 20, offset: int = 0) -> List[NewsArticle]:
        """按创建时间倒序获取文章"""

"""
评论仓储接口
"""
from abc import abstractmethod
from typing import List, Optional

from domain.common.repository import Repository

from .entity import Comment


class CommentRepository(Repository[Comment]):

    @abstractmethod
    async def list(
        self,
        match_id: Optional[str] = None,
        article_id: Optional[str] = None,
        parent_comment_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Comment]:
        """按创建时间正序获取评论"""

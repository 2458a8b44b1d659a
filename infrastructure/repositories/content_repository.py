"""
新闻/评论/收藏仓储实现
"""
from typing import List, Optional

from sqlalchemy import select

from domain.comment.entity import Comment
from domain.comment.repository import CommentRepository
from domain.common.exceptions import (
    ArticleNotFoundException,
    CommentNotFoundException,
    FavoriteNotFoundException,
)
from domain.favorite.entity import Favorite
from domain.favorite.repository import FavoriteRepository
from domain.news.entity import NewsArticle
from domain.news.repository import NewsRepository
from infrastructure.models.content import CommentModel, FavoriteModel, NewsArticleModel

from .base import SQLAlchemyRepository


class SQLAlchemyNewsRepository(SQLAlchemyRepository[NewsArticle, NewsArticleModel], NewsRepository):

    entity_cls = NewsArticle
    model_cls = NewsArticleModel
    not_found_exc = ArticleNotFoundException

    async def list(self, published: Optional[bool] = None, limit: int = 20, offset: int = 0) -> List[NewsArticle]:
        query = select(NewsArticleModel)
        if published is not None:
            query = query.where(NewsArticleModel.published == published)
        query = query.order_by(NewsArticleModel.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]


class SQLAlchemyCommentRepository(SQLAlchemyRepository[Comment, CommentModel], CommentRepository):

    entity_cls = Comment
    model_cls = CommentModel
    not_found_exc = CommentNotFoundException

    async def list(
        self,
        match_id: Optional[str] = None,
        article_id: Optional[str] = None,
        parent_comment_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Comment]:
        query = select(CommentModel).where(CommentModel.removed.is_(False))
        if match_id is not None:
            query = query.where(CommentModel.match_id == match_id)
        if article_id is not None:
            query = query.where(CommentModel.article_id == article_id)
        if parent_comment_id is not None:
            query = query.where(CommentModel.parent_comment_id == parent_comment_id)
        query = query.order_by(CommentModel.created_at.asc()).limit(limit)
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]


class SQLAlchemyFavoriteRepository(SQLAlchemyRepository[Favorite, FavoriteModel], FavoriteRepository):

    entity_cls = Favorite
    model_cls = FavoriteModel
    not_found_exc = FavoriteNotFoundException

    async def list_by_user(self, user_id: str) -> List[Favorite]:
        query = (
            select(FavoriteModel)
            .where(FavoriteModel.user_id == user_id)
            .order_by(FavoriteModel.created_at.desc())
        )
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

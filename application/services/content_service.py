"""
新闻/评论/收藏应用服务
"""
from typing import Callable, List, Optional

from application.dto import (
    CommentCreateDTO,
    CommentDTO,
    CommentUpdateDTO,
    FavoriteCreateDTO,
    FavoriteDTO,
    NewsCreateDTO,
    NewsDTO,
    NewsUpdateDTO,
)
from domain.comment.entity import Comment
from domain.common.exceptions import (
    ArticleNotFoundException,
    CommentNotFoundException,
    FavoriteNotFoundException,
    MatchNotFoundException,
    PermissionDeniedException,
    PlayerNotFoundException,
    TeamNotFoundException,
)
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.favorite.entity import Favorite
from domain.news.entity import NewsArticle
from domain.user.entity import User

from .common import domain_rules


class NewsApplicationService:

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def list_articles(self, published: Optional[bool] = None, limit: int = 20, offset: int = 0) -> List[NewsDTO]:
        async with self._uow_factory(readonly=True) as uow:
            articles = await uow.news_repository.list(published=published, limit=limit, offset=offset)
            return [NewsDTO.model_validate(a) for a in articles]

    async def get_article(self, article_id: str) -> NewsDTO:
        async with self._uow_factory(readonly=True) as uow:
            article = await uow.news_repository.get_by_id(article_id)
            if not article:
                raise ArticleNotFoundException(article_id)
            return NewsDTO.model_validate(article)

    async def create_article(self, author: User, data: NewsCreateDTO) -> NewsDTO:
        """作者固定为当前用户"""
        async with self._uow_factory() as uow:
            with domain_rules():
                article = NewsArticle(id=None, author_id=author.id, **data.model_dump(exclude_none=True))
            created = await uow.news_repository.create(article)
            return NewsDTO.model_validate(created)

    async def update_article(self, article_id: str, data: NewsUpdateDTO) -> NewsDTO:
        async with self._uow_factory() as uow:
            article = await uow.news_repository.get_by_id(article_id)
            if not article:
                raise ArticleNotFoundException(article_id)
            with domain_rules():
                article.apply_changes(data.model_dump(exclude_unset=True))
            updated = await uow.news_repository.update(article)
            return NewsDTO.model_validate(updated)

    async def delete_article(self, article_id: str) -> None:
        async with self._uow_factory() as uow:
            if not await uow.news_repository.delete(article_id):
                raise ArticleNotFoundException(article_id)


class CommentApplicationService:

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def list_comments(
        self,
        match_id: Optional[str] = None,
        article_id: Optional[str] = None,
        parent_comment_id: Optional[str] = None,
    ) -> List[CommentDTO]:
        async with self._uow_factory(readonly=True) as uow:
            comments = await uow.comment_repository.list(
                match_id=match_id, article_id=article_id, parent_comment_id=parent_comment_id
            )
            return [CommentDTO.model_validate(c) for c in comments]

    async def create_comment(self, user: User, data: CommentCreateDTO) -> CommentDTO:
        async with self._uow_factory() as uow:
            if data.match_id and not await uow.match_repository.get_by_id(data.match_id):
                raise MatchNotFoundException(data.match_id)
            if data.article_id and not await uow.news_repository.get_by_id(data.article_id):
                raise ArticleNotFoundException(data.article_id)
            if data.parent_comment_id and not await uow.comment_repository.get_by_id(data.parent_comment_id):
                raise CommentNotFoundException(data.parent_comment_id)
            with domain_rules():
                comment = Comment(id=None, user_id=user.id, **data.model_dump())
            created = await uow.comment_repository.create(comment)
            return CommentDTO.model_validate(created)

    async def update_comment(self, user: User, comment_id: str, data: CommentUpdateDTO) -> CommentDTO:
        """仅作者可编辑；返回更新后的记录"""
        async with self._uow_factory() as uow:
            comment = await uow.comment_repository.get_by_id(comment_id)
            if not comment:
                raise CommentNotFoundException(comment_id)
            if not comment.can_edit(user):
                raise PermissionDeniedException("Only the author can edit this comment")
            with domain_rules():
                comment.apply_changes({"content": data.content})
            updated = await uow.comment_repository.update(comment)
            return CommentDTO.model_validate(updated)

    async def delete_comment(self, user: User, comment_id: str) -> None:
        async with self._uow_factory() as uow:
            comment = await uow.comment_repository.get_by_id(comment_id)
            if not comment:
                raise CommentNotFoundException(comment_id)
            if not comment.can_delete(user):
                raise PermissionDeniedException("Not allowed to delete this comment")
            await uow.comment_repository.delete(comment_id)


class FavoriteApplicationService:

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def list_favorites(self, user: User) -> List[FavoriteDTO]:
        async with self._uow_factory(readonly=True) as uow:
            favorites = await uow.favorite_repository.list_by_user(user.id)
            return [FavoriteDTO.model_validate(f) for f in favorites]

    async def add_favorite(self, user: User, data: FavoriteCreateDTO) -> FavoriteDTO:
        async with self._uow_factory() as uow:
            if data.team_id and not await uow.team_repository.get_by_id(data.team_id):
                raise TeamNotFoundException(data.team_id)
            if data.player_id and not await uow.player_repository.get_by_id(data.player_id):
                raise PlayerNotFoundException(data.player_id)
            with domain_rules():
                favorite = Favorite(id=None, user_id=user.id, **data.model_dump())
            created = await uow.favorite_repository.create(favorite)
            return FavoriteDTO.model_validate(created)

    async def remove_favorite(self, user: User, favorite_id: str) -> None:
        """只能移除自己的收藏"""
        async with self._uow_factory() as uow:
            favorite = await uow.favorite_repository.get_by_id(favorite_id)
            if not favorite:
                raise FavoriteNotFoundException(favorite_id)
            if not favorite.owned_by(user.id):
                raise PermissionDeniedException("Not allowed to remove this favorite")
            await uow.favorite_repository.delete(favorite_id)

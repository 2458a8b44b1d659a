"""SQLAlchemy Unit of Work 实现"""
from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.database import AsyncSessionLocal
from infrastructure.repositories.content_repository import (
    SQLAlchemyCommentRepository,
    SQLAlchemyFavoriteRepository,
    SQLAlchemyNewsRepository,
)
from infrastructure.repositories.match_repository import (
    SQLAlchemyMatchEventRepository,
    SQLAlchemyMatchRepository,
    SQLAlchemyMatchStatsRepository,
)
from infrastructure.repositories.team_repository import SQLAlchemyPlayerRepository, SQLAlchemyTeamRepository
from infrastructure.repositories.user_repository import SQLAlchemyUserRepository

_REPOSITORIES = {
    "user_repository": SQLAlchemyUserRepository,
    "team_repository": SQLAlchemyTeamRepository,
    "player_repository": SQLAlchemyPlayerRepository,
    "match_repository": SQLAlchemyMatchRepository,
    "match_event_repository": SQLAlchemyMatchEventRepository,
    "match_stats_repository": SQLAlchemyMatchStatsRepository,
    "news_repository": SQLAlchemyNewsRepository,
    "comment_repository": SQLAlchemyCommentRepository,
    "favorite_repository": SQLAlchemyFavoriteRepository,
}


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """基于SQLAlchemy的Unit of Work"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        session: Optional[AsyncSession] = None,
        *,
        readonly: bool = False,
    ) -> None:
        super().__init__(readonly=readonly)
        self._session_factory = session_factory
        self._external_session = session
        self.session: Optional[AsyncSession] = session

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        if self.session is None:
            self.session = self._session_factory()
        for name, repo_cls in _REPOSITORIES.items():
            setattr(self, name, repo_cls(self.session))
        # 仅在非只读模式下显式开启事务
        if not self._readonly:
            await self.session.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            if self._external_session is None and self.session is not None:
                await self.session.close()
                self.session = None
            for name in _REPOSITORIES:
                setattr(self, name, None)

    async def commit(self) -> None:
        if self._readonly:
            # 只读情况下不提交
            self._committed = True
            return
        if self.session and self.session.in_transaction():
            await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session and self.session.in_transaction():
            await self.session.rollback()
        self._committed = False

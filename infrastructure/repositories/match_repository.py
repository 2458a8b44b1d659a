"""
比赛/比赛事件/单场数据仓储实现
"""
from typing import List, Optional

from sqlalchemy import select

from domain.common.exceptions import MatchNotFoundException
from domain.match.entity import Match, MatchEvent, MatchPlayerStats, MatchStatus
from domain.match.repository import MatchEventRepository, MatchRepository, MatchStatsRepository
from infrastructure.models.match import MatchEventModel, MatchModel, MatchPlayerStatsModel

from .base import SQLAlchemyRepository


class SQLAlchemyMatchRepository(SQLAlchemyRepository[Match, MatchModel], MatchRepository):

    entity_cls = Match
    model_cls = MatchModel
    not_found_exc = MatchNotFoundException

    async def list(self, status: Optional[MatchStatus] = None, limit: int = 20, offset: int = 0) -> List[Match]:
        query = select(MatchModel)
        if status is not None:
            query = query.where(MatchModel.status == MatchStatus(status).value)
        query = query.order_by(MatchModel.scheduled_at.desc(), MatchModel.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]


class SQLAlchemyMatchEventRepository(SQLAlchemyRepository[MatchEvent, MatchEventModel], MatchEventRepository):

    entity_cls = MatchEvent
    model_cls = MatchEventModel
    field_map = {"metadata": "event_metadata"}

    async def list_by_match(self, match_id: str, limit: int = 100) -> List[MatchEvent]:
        query = (
            select(MatchEventModel)
            .where(MatchEventModel.match_id == match_id)
            .order_by(MatchEventModel.timestamp.desc(), MatchEventModel.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]


class SQLAlchemyMatchStatsRepository(
    SQLAlchemyRepository[MatchPlayerStats, MatchPlayerStatsModel], MatchStatsRepository
):

    entity_cls = MatchPlayerStats
    model_cls = MatchPlayerStatsModel

    async def list_by_match(self, match_id: str) -> List[MatchPlayerStats]:
        query = (
            select(MatchPlayerStatsModel)
            .where(MatchPlayerStatsModel.match_id == match_id)
            .order_by(MatchPlayerStatsModel.rating.desc())
        )
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

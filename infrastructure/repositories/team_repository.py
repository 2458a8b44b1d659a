"""
战队/选手仓储实现
"""
from typing import List, Optional

from sqlalchemy import select

from domain.common.exceptions import PlayerNotFoundException, TeamNotFoundException
from domain.player.entity import Player
from domain.player.repository import PlayerRepository
from domain.team.entity import Team
from domain.team.repository import TeamRepository
from infrastructure.models.team import PlayerModel, TeamModel

from .base import SQLAlchemyRepository


class SQLAlchemyTeamRepository(SQLAlchemyRepository[Team, TeamModel], TeamRepository):

    entity_cls = Team
    model_cls = TeamModel
    not_found_exc = TeamNotFoundException

    async def list(self, limit: int = 50, offset: int = 0) -> List[Team]:
        # 未排名的战队排在最后
        query = (
            select(TeamModel)
            .order_by(TeamModel.rank.is_(None), TeamModel.rank.asc(), TeamModel.name.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]


class SQLAlchemyPlayerRepository(SQLAlchemyRepository[Player, PlayerModel], PlayerRepository):

    entity_cls = Player
    model_cls = PlayerModel
    not_found_exc = PlayerNotFoundException

    async def list(self, team_id: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[Player]:
        query = select(PlayerModel)
        if team_id is not None:
            query = query.where(PlayerModel.team_id == team_id)
        query = query.order_by(PlayerModel.alias.asc()).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

"""
比赛应用服务 - 比赛、时间线事件与选手单场数据

比赛事件的持久化只有这一条路径，HTTP 接口与 WebSocket 命令共用。
"""
from typing import Callable, List, Optional

from application.dto import (
    MatchCreateDTO,
    MatchDTO,
    MatchEventCreateDTO,
    MatchEventDTO,
    MatchStatsCreateDTO,
    MatchStatsDTO,
    MatchUpdateDTO,
)
from core.config import settings
from domain.common.exceptions import MatchNotFoundException, PlayerNotFoundException, TeamNotFoundException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.match.entity import Match, MatchEvent, MatchPlayerStats, MatchStatus

from .common import domain_rules


def clamp_event_limit(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return settings.MATCH_EVENTS_DEFAULT_LIMIT
    return min(limit, settings.MATCH_EVENTS_MAX_LIMIT)


class MatchApplicationService:

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    # ---------------- matches ----------------

    async def list_matches(
        self, status: Optional[MatchStatus] = None, limit: int = 20, offset: int = 0
    ) -> List[MatchDTO]:
        async with self._uow_factory(readonly=True) as uow:
            matches = await uow.match_repository.list(status=status, limit=limit, offset=offset)
            return [MatchDTO.model_validate(m) for m in matches]

    async def get_match(self, match_id: str) -> MatchDTO:
        async with self._uow_factory(readonly=True) as uow:
            match = await uow.match_repository.get_by_id(match_id)
            if not match:
                raise MatchNotFoundException(match_id)
            return MatchDTO.model_validate(match)

    async def create_match(self, data: MatchCreateDTO) -> MatchDTO:
        async with self._uow_factory() as uow:
            for team_id in (data.team1_id, data.team2_id):
                if not await uow.team_repository.get_by_id(team_id):
                    raise TeamNotFoundException(team_id)
            with domain_rules():
                match = Match(id=None, **data.model_dump(exclude_none=True))
            created = await uow.match_repository.create(match)
            return MatchDTO.model_validate(created)

    async def update_match(self, match_id: str, data: MatchUpdateDTO) -> MatchDTO:
        """比分/状态同步；状态切换时由实体补记开始/结束时间"""
        async with self._uow_factory() as uow:
            match = await uow.match_repository.get_by_id(match_id)
            if not match:
                raise MatchNotFoundException(match_id)
            with domain_rules():
                match.apply_changes(data.model_dump(exclude_unset=True))
            updated = await uow.match_repository.update(match)
            return MatchDTO.model_validate(updated)

    async def delete_match(self, match_id: str) -> None:
        async with self._uow_factory() as uow:
            if not await uow.match_repository.delete(match_id):
                raise MatchNotFoundException(match_id)

    # ---------------- timeline events ----------------

    async def list_events(self, match_id: str, limit: Optional[int] = None) -> List[MatchEventDTO]:
        async with self._uow_factory(readonly=True) as uow:
            events = await uow.match_event_repository.list_by_match(match_id, limit=clamp_event_limit(limit))
            return [MatchEventDTO.model_validate(e) for e in events]

    async def create_event(self, data: MatchEventCreateDTO) -> MatchEventDTO:
        async with self._uow_factory() as uow:
            if not await uow.match_repository.get_by_id(data.match_id):
                raise MatchNotFoundException(data.match_id)
            if data.player_id and not await uow.player_repository.get_by_id(data.player_id):
                raise PlayerNotFoundException(data.player_id)
            with domain_rules():
                event = MatchEvent(id=None, **data.model_dump(exclude_none=True))
            created = await uow.match_event_repository.create(event)
            return MatchEventDTO.model_validate(created)

    # ---------------- player stats ----------------

    async def list_stats(self, match_id: str) -> List[MatchStatsDTO]:
        async with self._uow_factory(readonly=True) as uow:
            stats = await uow.match_stats_repository.list_by_match(match_id)
            return [MatchStatsDTO.model_validate(s) for s in stats]

    async def create_stats(self, match_id: str, data: MatchStatsCreateDTO) -> MatchStatsDTO:
        async with self._uow_factory() as uow:
            if not await uow.match_repository.get_by_id(match_id):
                raise MatchNotFoundException(match_id)
            if not await uow.player_repository.get_by_id(data.player_id):
                raise PlayerNotFoundException(data.player_id)
            with domain_rules():
                stats = MatchPlayerStats(id=None, match_id=match_id, **data.model_dump())
            created = await uow.match_stats_repository.create(stats)
            return MatchStatsDTO.model_validate(created)

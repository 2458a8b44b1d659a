"""
战队/选手应用服务
"""
from typing import Callable, List, Optional

from application.dto import PlayerCreateDTO, PlayerDTO, PlayerUpdateDTO, TeamCreateDTO, TeamDTO, TeamUpdateDTO
from domain.common.exceptions import PlayerNotFoundException, TeamNotFoundException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.player.entity import Player
from domain.team.entity import Team

from .common import domain_rules


class TeamApplicationService:

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def list_teams(self, limit: int = 50, offset: int = 0) -> List[TeamDTO]:
        async with self._uow_factory(readonly=True) as uow:
            teams = await uow.team_repository.list(limit=limit, offset=offset)
            return [TeamDTO.model_validate(t) for t in teams]

    async def get_team(self, team_id: str) -> TeamDTO:
        async with self._uow_factory(readonly=True) as uow:
            team = await uow.team_repository.get_by_id(team_id)
            if not team:
                raise TeamNotFoundException(team_id)
            return TeamDTO.model_validate(team)

    async def create_team(self, data: TeamCreateDTO) -> TeamDTO:
        async with self._uow_factory() as uow:
            with domain_rules():
                team = Team(id=None, **data.model_dump())
            created = await uow.team_repository.create(team)
            return TeamDTO.model_validate(created)

    async def update_team(self, team_id: str, data: TeamUpdateDTO) -> TeamDTO:
        async with self._uow_factory() as uow:
            team = await uow.team_repository.get_by_id(team_id)
            if not team:
                raise TeamNotFoundException(team_id)
            with domain_rules():
                team.apply_changes(data.model_dump(exclude_unset=True))
            updated = await uow.team_repository.update(team)
            return TeamDTO.model_validate(updated)

    async def delete_team(self, team_id: str) -> None:
        async with self._uow_factory() as uow:
            if not await uow.team_repository.delete(team_id):
                raise TeamNotFoundException(team_id)


class PlayerApplicationService:

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def list_players(self, team_id: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[PlayerDTO]:
        async with self._uow_factory(readonly=True) as uow:
            players = await uow.player_repository.list(team_id=team_id, limit=limit, offset=offset)
            return [PlayerDTO.model_validate(p) for p in players]

    async def get_player(self, player_id: str) -> PlayerDTO:
        async with self._uow_factory(readonly=True) as uow:
            player = await uow.player_repository.get_by_id(player_id)
            if not player:
                raise PlayerNotFoundException(player_id)
            return PlayerDTO.model_validate(player)

    async def create_player(self, data: PlayerCreateDTO) -> PlayerDTO:
        async with self._uow_factory() as uow:
            if data.team_id and not await uow.team_repository.get_by_id(data.team_id):
                raise TeamNotFoundException(data.team_id)
            with domain_rules():
                player = Player(id=None, **data.model_dump())
            created = await uow.player_repository.create(player)
            return PlayerDTO.model_validate(created)

    async def update_player(self, player_id: str, data: PlayerUpdateDTO) -> PlayerDTO:
        changes = data.model_dump(exclude_unset=True)
        async with self._uow_factory() as uow:
            player = await uow.player_repository.get_by_id(player_id)
            if not player:
                raise PlayerNotFoundException(player_id)
            if changes.get("team_id") and not await uow.team_repository.get_by_id(changes["team_id"]):
                raise TeamNotFoundException(changes["team_id"])
            with domain_rules():
                player.apply_changes(changes)
            updated = await uow.player_repository.update(player)
            return PlayerDTO.model_validate(updated)

    async def delete_player(self, player_id: str) -> None:
        async with self._uow_factory() as uow:
            if not await uow.player_repository.delete(player_id):
                raise PlayerNotFoundException(player_id)

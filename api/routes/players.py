"""
选手API路由
"""
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from api.dependencies import get_player_service, get_realtime_service, require_admin
from application.dto import DeletedRefDTO, PlayerCreateDTO, PlayerDTO, PlayerUpdateDTO
from application.ports.realtime import PlayerEnvelope, deleted
from application.services.realtime_service import RealtimeService
from application.services.team_service import PlayerApplicationService
from core.config import settings
from core.response import Response as ApiResponse, success_response
from domain.user.entity import User

router = APIRouter(prefix="/players", tags=["选手"])


@router.get("", summary="选手列表", response_model=ApiResponse[List[PlayerDTO]])
async def list_players(
    team_id: Optional[str] = Query(None, alias="teamId"),
    limit: int = Query(50, ge=1, le=settings.MAX_LIST_LIMIT),
    offset: int = Query(0, ge=0),
    service: PlayerApplicationService = Depends(get_player_service),
):
    return success_response(data=await service.list_players(team_id=team_id, limit=limit, offset=offset))


@router.get("/{player_id}", summary="选手详情", response_model=ApiResponse[PlayerDTO])
async def get_player(player_id: str, service: PlayerApplicationService = Depends(get_player_service)):
    return success_response(data=await service.get_player(player_id))


@router.post("", summary="创建选手", status_code=201, response_model=ApiResponse[PlayerDTO])
async def create_player(
    data: PlayerCreateDTO,
    background_tasks: BackgroundTasks,
    service: PlayerApplicationService = Depends(get_player_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    player = await service.create_player(data)
    background_tasks.add_task(rt.publish_safely, PlayerEnvelope(type="player_created", data=player))
    return success_response(data=player, message="Player created")


@router.patch("/{player_id}", summary="更新选手", response_model=ApiResponse[PlayerDTO])
async def update_player(
    player_id: str,
    data: PlayerUpdateDTO,
    background_tasks: BackgroundTasks,
    service: PlayerApplicationService = Depends(get_player_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    player = await service.update_player(player_id, data)
    background_tasks.add_task(rt.publish_safely, PlayerEnvelope(type="player_updated", data=player))
    return success_response(data=player, message="Player updated")


@router.delete("/{player_id}", summary="删除选手", response_model=ApiResponse[DeletedRefDTO])
async def delete_player(
    player_id: str,
    background_tasks: BackgroundTasks,
    service: PlayerApplicationService = Depends(get_player_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    await service.delete_player(player_id)
    background_tasks.add_task(rt.publish_safely, deleted("player", player_id))
    return success_response(data=DeletedRefDTO(id=player_id), message="Player deleted")

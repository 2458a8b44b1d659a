"""
战队API路由 - 变更成功后在响应发送完毕再广播
"""
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from api.dependencies import get_realtime_service, get_team_service, require_admin
from application.dto import DeletedRefDTO, TeamCreateDTO, TeamDTO, TeamUpdateDTO
from application.ports.realtime import TeamEnvelope, deleted
from application.services.realtime_service import RealtimeService
from application.services.team_service import TeamApplicationService
from core.config import settings
from core.response import Response as ApiResponse, success_response
from domain.user.entity import User

router = APIRouter(prefix="/teams", tags=["战队"])


@router.get("", summary="战队列表", response_model=ApiResponse[List[TeamDTO]])
async def list_teams(
    limit: int = Query(50, ge=1, le=settings.MAX_LIST_LIMIT),
    offset: int = Query(0, ge=0),
    service: TeamApplicationService = Depends(get_team_service),
):
    return success_response(data=await service.list_teams(limit=limit, offset=offset))


@router.get("/{team_id}", summary="战队详情", response_model=ApiResponse[TeamDTO])
async def get_team(team_id: str, service: TeamApplicationService = Depends(get_team_service)):
    return success_response(data=await service.get_team(team_id))


@router.post("", summary="创建战队", status_code=201, response_model=ApiResponse[TeamDTO])
async def create_team(
    data: TeamCreateDTO,
    background_tasks: BackgroundTasks,
    service: TeamApplicationService = Depends(get_team_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    team = await service.create_team(data)
    background_tasks.add_task(rt.publish_safely, TeamEnvelope(type="team_created", data=team))
    return success_response(data=team, message="Team created")


@router.patch("/{team_id}", summary="更新战队", response_model=ApiResponse[TeamDTO])
async def update_team(
    team_id: str,
    data: TeamUpdateDTO,
    background_tasks: BackgroundTasks,
    service: TeamApplicationService = Depends(get_team_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    team = await service.update_team(team_id, data)
    background_tasks.add_task(rt.publish_safely, TeamEnvelope(type="team_updated", data=team))
    return success_response(data=team, message="Team updated")


@router.delete("/{team_id}", summary="删除战队", response_model=ApiResponse[DeletedRefDTO])
async def delete_team(
    team_id: str,
    background_tasks: BackgroundTasks,
    service: TeamApplicationService = Depends(get_team_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    await service.delete_team(team_id)
    background_tasks.add_task(rt.publish_safely, deleted("team", team_id))
    return success_response(data=DeletedRefDTO(id=team_id), message="Team deleted")

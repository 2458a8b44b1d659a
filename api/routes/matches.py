"""
比赛API路由 - 比赛、时间线事件、选手单场数据

比分/状态更新会先广播 match_update（客户端就地修补缓存），再广播 match_updated。
"""
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from api.dependencies import get_match_service, get_realtime_service, require_admin
from application.dto import (
    DeletedRefDTO,
    MatchCreateDTO,
    MatchDTO,
    MatchEventCreateDTO,
    MatchEventDTO,
    MatchEventPayloadDTO,
    MatchStatsCreateDTO,
    MatchStatsDTO,
    MatchUpdateDTO,
)
from application.ports.realtime import MatchEnvelope, MatchStatsEnvelope, MatchUpdateEnvelope, deleted
from application.services.match_service import MatchApplicationService
from application.services.realtime_service import RealtimeService
from core.config import settings
from core.response import Response as ApiResponse, success_response
from domain.match.entity import MatchStatus
from domain.user.entity import User

router = APIRouter(prefix="/matches", tags=["比赛"])


@router.get("", summary="比赛列表", response_model=ApiResponse[List[MatchDTO]])
async def list_matches(
    status: Optional[MatchStatus] = Query(None),
    limit: int = Query(settings.DEFAULT_LIST_LIMIT, ge=1, le=settings.MAX_LIST_LIMIT),
    offset: int = Query(0, ge=0),
    service: MatchApplicationService = Depends(get_match_service),
):
    return success_response(data=await service.list_matches(status=status, limit=limit, offset=offset))


@router.get("/{match_id}", summary="比赛详情", response_model=ApiResponse[MatchDTO])
async def get_match(match_id: str, service: MatchApplicationService = Depends(get_match_service)):
    return success_response(data=await service.get_match(match_id))


@router.post("", summary="创建比赛", status_code=201, response_model=ApiResponse[MatchDTO])
async def create_match(
    data: MatchCreateDTO,
    background_tasks: BackgroundTasks,
    service: MatchApplicationService = Depends(get_match_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    match = await service.create_match(data)
    background_tasks.add_task(rt.publish_safely, MatchEnvelope(type="match_created", data=match))
    return success_response(data=match, message="Match created")


@router.patch("/{match_id}", summary="更新比分/状态", response_model=ApiResponse[MatchDTO])
async def update_match(
    match_id: str,
    data: MatchUpdateDTO,
    background_tasks: BackgroundTasks,
    service: MatchApplicationService = Depends(get_match_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    match = await service.update_match(match_id, data)
    background_tasks.add_task(
        rt.publish_safely,
        MatchUpdateEnvelope(data=match),
        MatchEnvelope(type="match_updated", data=match),
    )
    return success_response(data=match, message="Match updated")


@router.delete("/{match_id}", summary="删除比赛", response_model=ApiResponse[DeletedRefDTO])
async def delete_match(
    match_id: str,
    background_tasks: BackgroundTasks,
    service: MatchApplicationService = Depends(get_match_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    await service.delete_match(match_id)
    background_tasks.add_task(rt.publish_safely, deleted("match", match_id))
    return success_response(data=DeletedRefDTO(id=match_id), message="Match deleted")


# ---------------- timeline events ----------------

@router.get("/{match_id}/events", summary="比赛时间线", response_model=ApiResponse[List[MatchEventDTO]])
async def list_match_events(
    match_id: str,
    limit: Optional[int] = Query(None, ge=1, description="默认 100，最大 500"),
    service: MatchApplicationService = Depends(get_match_service),
):
    return success_response(data=await service.list_events(match_id, limit=limit))


@router.post(
    "/{match_id}/events",
    summary="记录比赛事件",
    status_code=201,
    response_model=ApiResponse[MatchEventDTO],
)
async def create_match_event(
    match_id: str,
    payload: MatchEventPayloadDTO,
    background_tasks: BackgroundTasks,
    service: MatchApplicationService = Depends(get_match_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    data = MatchEventCreateDTO(match_id=match_id, **payload.model_dump())
    event = await service.create_event(data)
    background_tasks.add_task(rt.match_event_created, event)
    return success_response(data=event, message="Match event created")


# ---------------- player stats ----------------

@router.get("/{match_id}/stats", summary="选手单场数据", response_model=ApiResponse[List[MatchStatsDTO]])
async def list_match_stats(match_id: str, service: MatchApplicationService = Depends(get_match_service)):
    return success_response(data=await service.list_stats(match_id))


@router.post(
    "/{match_id}/stats",
    summary="录入选手单场数据",
    status_code=201,
    response_model=ApiResponse[MatchStatsDTO],
)
async def create_match_stats(
    match_id: str,
    data: MatchStatsCreateDTO,
    background_tasks: BackgroundTasks,
    service: MatchApplicationService = Depends(get_match_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    stats = await service.create_stats(match_id, data)
    background_tasks.add_task(rt.publish_safely, MatchStatsEnvelope(data=stats))
    return success_response(data=stats, message="Match stats created")

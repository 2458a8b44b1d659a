"""
收藏API路由 - 只对当前用户自己的收藏生效
"""
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends

from api.dependencies import get_current_user, get_favorite_service, get_realtime_service
from application.dto import DeletedRefDTO, FavoriteCreateDTO, FavoriteDTO
from application.ports.realtime import FavoriteEnvelope, deleted
from application.services.content_service import FavoriteApplicationService
from application.services.realtime_service import RealtimeService
from core.response import Response as ApiResponse, success_response
from domain.user.entity import User

router = APIRouter(prefix="/favorites", tags=["收藏"])


@router.get("", summary="我的收藏", response_model=ApiResponse[List[FavoriteDTO]])
async def list_favorites(
    service: FavoriteApplicationService = Depends(get_favorite_service),
    current_user: User = Depends(get_current_user),
):
    return success_response(data=await service.list_favorites(current_user))


@router.post("", summary="添加收藏", status_code=201, response_model=ApiResponse[FavoriteDTO])
async def add_favorite(
    data: FavoriteCreateDTO,
    background_tasks: BackgroundTasks,
    service: FavoriteApplicationService = Depends(get_favorite_service),
    rt: RealtimeService = Depends(get_realtime_service),
    current_user: User = Depends(get_current_user),
):
    favorite = await service.add_favorite(current_user, data)
    background_tasks.add_task(rt.publish_safely, FavoriteEnvelope(data=favorite))
    return success_response(data=favorite, message="Favorite added")


@router.delete("/{favorite_id}", summary="移除收藏", response_model=ApiResponse[DeletedRefDTO])
async def remove_favorite(
    favorite_id: str,
    background_tasks: BackgroundTasks,
    service: FavoriteApplicationService = Depends(get_favorite_service),
    rt: RealtimeService = Depends(get_realtime_service),
    current_user: User = Depends(get_current_user),
):
    await service.remove_favorite(current_user, favorite_id)
    background_tasks.add_task(rt.publish_safely, deleted("favorite", favorite_id))
    return success_response(data=DeletedRefDTO(id=favorite_id), message="Favorite removed")

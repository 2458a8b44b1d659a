"""
新闻API路由
"""
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from api.dependencies import get_news_service, get_realtime_service, require_admin
from application.dto import DeletedRefDTO, NewsCreateDTO, NewsDTO, NewsUpdateDTO
from application.ports.realtime import NewsEnvelope, deleted
from application.services.content_service import NewsApplicationService
from application.services.realtime_service import RealtimeService
from core.config import settings
from core.response import Response as ApiResponse, success_response
from domain.user.entity import User

router = APIRouter(prefix="/news", tags=["新闻"])


@router.get("", summary="新闻列表", response_model=ApiResponse[List[NewsDTO]])
async def list_news(
    published: Optional[bool] = Query(None),
    limit: int = Query(settings.DEFAULT_LIST_LIMIT, ge=1, le=settings.MAX_LIST_LIMIT),
    offset: int = Query(0, ge=0),
    service: NewsApplicationService = Depends(get_news_service),
):
    return success_response(data=await service.list_articles(published=published, limit=limit, offset=offset))


@router.get("/{article_id}", summary="新闻详情", response_model=ApiResponse[NewsDTO])
async def get_news(article_id: str, service: NewsApplicationService = Depends(get_news_service)):
    return success_response(data=await service.get_article(article_id))


@router.post("", summary="发布新闻", status_code=201, response_model=ApiResponse[NewsDTO])
async def create_news(
    data: NewsCreateDTO,
    background_tasks: BackgroundTasks,
    service: NewsApplicationService = Depends(get_news_service),
    rt: RealtimeService = Depends(get_realtime_service),
    current_user: User = Depends(require_admin),
):
    """作者取当前登录用户，忽略请求体中的作者字段"""
    article = await service.create_article(current_user, data)
    background_tasks.add_task(rt.publish_safely, NewsEnvelope(type="news_created", data=article))
    return success_response(data=article, message="News created")


@router.patch("/{article_id}", summary="更新新闻", response_model=ApiResponse[NewsDTO])
async def update_news(
    article_id: str,
    data: NewsUpdateDTO,
    background_tasks: BackgroundTasks,
    service: NewsApplicationService = Depends(get_news_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    article = await service.update_article(article_id, data)
    background_tasks.add_task(rt.publish_safely, NewsEnvelope(type="news_updated", data=article))
    return success_response(data=article, message="News updated")


@router.delete("/{article_id}", summary="删除新闻", response_model=ApiResponse[DeletedRefDTO])
async def delete_news(
    article_id: str,
    background_tasks: BackgroundTasks,
    service: NewsApplicationService = Depends(get_news_service),
    rt: RealtimeService = Depends(get_realtime_service),
    _admin: User = Depends(require_admin),
):
    await service.delete_article(article_id)
    background_tasks.add_task(rt.publish_safely, deleted("news", article_id))
    return success_response(data=DeletedRefDTO(id=article_id), message="News deleted")

"""
评论API路由 - 作者可编辑；作者、版主、管理员可删除
"""
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from api.dependencies import get_comment_service, get_current_user, get_realtime_service
from application.dto import CommentCreateDTO, CommentDTO, CommentUpdateDTO, DeletedRefDTO
from application.ports.realtime import CommentEnvelope, deleted
from application.services.content_service import CommentApplicationService
from application.services.realtime_service import RealtimeService
from core.response import Response as ApiResponse, success_response
from domain.user.entity import User

router = APIRouter(prefix="/comments", tags=["评论"])


@router.get("", summary="评论列表", response_model=ApiResponse[List[CommentDTO]])
async def list_comments(
    match_id: Optional[str] = Query(None, alias="matchId"),
    article_id: Optional[str] = Query(None, alias="articleId"),
    parent_comment_id: Optional[str] = Query(None, alias="parentCommentId"),
    service: CommentApplicationService = Depends(get_comment_service),
):
    comments = await service.list_comments(
        match_id=match_id, article_id=article_id, parent_comment_id=parent_comment_id
    )
    return success_response(data=comments)


@router.post("", summary="发表评论", status_code=201, response_model=ApiResponse[CommentDTO])
async def create_comment(
    data: CommentCreateDTO,
    background_tasks: BackgroundTasks,
    service: CommentApplicationService = Depends(get_comment_service),
    rt: RealtimeService = Depends(get_realtime_service),
    current_user: User = Depends(get_current_user),
):
    comment = await service.create_comment(current_user, data)
    background_tasks.add_task(rt.publish_safely, CommentEnvelope(type="comment_created", data=comment))
    return success_response(data=comment, message="Comment created")


@router.patch("/{comment_id}", summary="编辑评论", response_model=ApiResponse[CommentDTO])
async def update_comment(
    comment_id: str,
    data: CommentUpdateDTO,
    background_tasks: BackgroundTasks,
    service: CommentApplicationService = Depends(get_comment_service),
    rt: RealtimeService = Depends(get_realtime_service),
    current_user: User = Depends(get_current_user),
):
    comment = await service.update_comment(current_user, comment_id, data)
    background_tasks.add_task(rt.publish_safely, CommentEnvelope(type="comment_updated", data=comment))
    return success_response(data=comment, message="Comment updated")


@router.delete("/{comment_id}", summary="删除评论", response_model=ApiResponse[DeletedRefDTO])
async def delete_comment(
    comment_id: str,
    background_tasks: BackgroundTasks,
    service: CommentApplicationService = Depends(get_comment_service),
    rt: RealtimeService = Depends(get_realtime_service),
    current_user: User = Depends(get_current_user),
):
    await service.delete_comment(current_user, comment_id)
    background_tasks.add_task(rt.publish_safely, deleted("comment", comment_id))
    return success_response(data=DeletedRefDTO(id=comment_id), message="Comment deleted")

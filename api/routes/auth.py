"""
认证API路由 - 登录由外部身份提供方完成，这里只提供当前用户查询
"""
from fastapi import APIRouter, Depends

from api.dependencies import get_current_user
from application.dto import UserResponseDTO
from core.response import Response as ApiResponse, success_response
from domain.user.entity import User

router = APIRouter(prefix="/auth", tags=["认证"])


@router.get("/user", summary="获取当前用户信息", response_model=ApiResponse[UserResponseDTO])
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    return success_response(data=UserResponseDTO.model_validate(current_user))

"""
用户档案路由模块
"""

from fastapi import APIRouter, Depends

from ...core.error_handler import create_success_response
from ...core.security import get_auth_user_id, get_current_user_id
from ...schemas.user import RegisterProfileRequest
from ...services.user_service import user_service

router = APIRouter()


@router.get("/me")
def get_my_profile(user_id: int = Depends(get_current_user_id)):
    """获取当前用户档案"""
    profile = user_service.get_profile(user_id)
    return create_success_response(data=profile.model_dump(mode="json"))


@router.post("/me")
def register_my_profile(req: RegisterProfileRequest, auth_user_id: str = Depends(get_auth_user_id)):
    """为当前认证身份创建用户档案（已存在时直接返回）"""
    profile = user_service.register_profile(auth_user_id, req.full_name)
    return create_success_response(data=profile.model_dump(mode="json"))

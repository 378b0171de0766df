"""
用户相关数据模型
"""

from typing import Optional

from pydantic import Field

from .base import BaseEntity, TimestampMixin


class AppUser(BaseEntity, TimestampMixin):
    """应用用户档案，对应认证系统中的一个身份"""
    id: int = Field(..., description="用户ID")
    auth_user_id: str = Field(..., description="认证身份ID")
    full_name: Optional[str] = Field(None, description="姓名")
    role: str = Field("CLIENT", description="角色")

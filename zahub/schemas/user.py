"""
用户相关的请求模式
"""

from pydantic import BaseModel, Field


class RegisterProfileRequest(BaseModel):
    """注册用户档案"""
    full_name: str = Field(..., max_length=80, description="姓名")

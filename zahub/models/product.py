"""
菜单商品与促销模型
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import BaseEntity, TimestampMixin


class Product(BaseEntity, TimestampMixin):
    """菜单上的固定款披萨"""
    id: int = Field(..., description="商品ID")
    name: str = Field(..., description="名称")
    description: Optional[str] = Field(None, description="描述")
    price: int = Field(..., ge=0, description="价格")
    tag: Optional[str] = Field(None, description="标签")
    image_url: Optional[str] = Field(None, description="图片地址")


class Promotion(BaseEntity, TimestampMixin):
    """首页促销"""
    id: int = Field(..., description="促销ID")
    title: str = Field(..., description="标题")
    subtitle: Optional[str] = Field(None, description="副标题")
    badge: Optional[str] = Field(None, description="角标")
    image_url: Optional[str] = Field(None, description="图片地址")
    sort_order: int = Field(0, description="展示顺序")
    is_active: bool = Field(True, description="是否启用")
    starts_at: Optional[datetime] = Field(None, description="开始时间")
    ends_at: Optional[datetime] = Field(None, description="结束时间")

"""
订单相关数据模型
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import BaseEntity, TimestampMixin
from .ingredient import IngredientModifier


class OrderStatus(str, Enum):
    """订单状态枚举

    本服务只创建 PENDING 订单，其余状态由外部履约系统流转
    """
    PENDING = "PENDING"         # 待处理
    ACCEPTED = "ACCEPTED"       # 已接单
    REJECTED = "REJECTED"       # 已拒单
    PREPARING = "PREPARING"     # 制作中
    ON_THE_WAY = "ON_THE_WAY"   # 配送中
    DELIVERED = "DELIVERED"     # 已送达
    CANCELED = "CANCELED"       # 已取消


class OrderLine(BaseEntity):
    """订单明细（购物车条目在下单时的快照）"""
    id: int = Field(..., description="明细ID")
    order_id: int = Field(..., description="订单ID")
    base_product_id: Optional[int] = Field(None, description="菜单商品ID")
    display_name: str = Field(..., description="展示名称")
    size: str = Field(..., description="尺寸")
    quantity: int = Field(..., description="数量")
    unit_price: int = Field(..., description="单价")
    subtotal: int = Field(..., description="小计")
    modifiers: List[IngredientModifier] = Field(default_factory=list, description="配料修饰快照")


class Order(BaseEntity, TimestampMixin):
    """订单"""
    id: int = Field(..., description="订单ID")
    client_id: int = Field(..., description="下单用户ID")
    status: OrderStatus = Field(..., description="订单状态")
    total: int = Field(..., description="订单总额快照")
    delivery_address: Optional[str] = Field(None, description="配送地址")
    channel: Optional[str] = Field(None, description="下单渠道")
    assigned_agent_id: Optional[int] = Field(None, description="配送员ID")
    lines: List[OrderLine] = Field(default_factory=list, description="订单明细")

"""
订单相关的请求/响应模式
"""

from pydantic import BaseModel, Field
from typing import Optional

from ..models.order import OrderStatus


class CheckoutRequest(BaseModel):
    """结算请求"""
    delivery_address: Optional[str] = Field(None, max_length=200, description="配送地址")


class CheckoutResponse(BaseModel):
    """结算响应"""
    order_id: int = Field(..., description="订单ID")
    status: OrderStatus = Field(..., description="订单状态")
    total: Optional[int] = Field(None, description="订单总额，回读失败时为空")
    line_count: Optional[int] = Field(None, description="订单明细数，回读失败时为空")

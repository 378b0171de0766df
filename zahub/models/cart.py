"""
购物车相关数据模型
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from .base import BaseEntity, TimestampMixin
from .ingredient import IngredientModifier, ModifierKind


class PizzaSize(str, Enum):
    """披萨尺寸"""
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"


# 饼底与饼边的可选项
CRUST_STYLES = ["Tradicional", "Delgada", "Pan Pizza"]
CRUST_EDGES = ["Clásico", "Queso", "Ajo y mantequilla"]


class PizzaBuild(BaseModel):
    """一次自定义披萨的组装结果，用于加入购物车"""
    size: PizzaSize = Field(..., description="尺寸")
    crust_style: str = Field(CRUST_STYLES[0], description="饼底")
    crust_edge: str = Field(CRUST_EDGES[0], description="饼边")
    display_name: str = Field("Mi Za personalizada", min_length=1, max_length=80, description="展示名称")
    selections: List[Tuple[int, ModifierKind]] = Field(default_factory=list, description="配料选择快照")


class CartLine(BaseEntity, TimestampMixin):
    """购物车条目"""
    id: int = Field(..., description="条目ID")
    user_id: int = Field(..., description="应用用户ID")
    base_product_id: Optional[int] = Field(None, description="菜单商品ID，自定义披萨为空")
    display_name: str = Field(..., description="展示名称")
    size: PizzaSize = Field(..., description="尺寸")
    crust_style: Optional[str] = Field(None, description="饼底")
    crust_edge: Optional[str] = Field(None, description="饼边")
    quantity: int = Field(..., ge=1, description="数量")
    unit_price: int = Field(..., ge=0, description="单价")
    subtotal: int = Field(..., ge=0, description="小计")
    modifiers: List[IngredientModifier] = Field(default_factory=list, description="配料修饰")

    @property
    def expected_subtotal(self) -> int:
        return self.unit_price * self.quantity

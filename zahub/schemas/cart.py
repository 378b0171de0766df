"""
购物车相关的请求/响应模式
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from ..models.cart import CRUST_EDGES, CRUST_STYLES, CartLine, PizzaBuild, PizzaSize
from ..models.ingredient import ModifierKind


class SelectionItem(BaseModel):
    """单个配料选择"""
    ingredient_id: int = Field(..., description="配料ID")
    kind: ModifierKind = Field(..., description="修饰类型")


class QuoteRequest(BaseModel):
    """试算价格请求"""
    size: PizzaSize = Field(..., description="尺寸")
    selections: List[SelectionItem] = Field(default_factory=list, description="配料选择")

    def pairs(self) -> list:
        return [(item.ingredient_id, item.kind) for item in self.selections]


class ToggleRequest(QuoteRequest):
    """点击某个配料，推进其选择状态"""
    ingredient_id: int = Field(..., description="被点击的配料ID")


class QuoteResponse(BaseModel):
    """试算结果"""
    size: PizzaSize = Field(..., description="尺寸")
    selections: List[SelectionItem] = Field(..., description="当前配料选择")
    unit_price: int = Field(..., description="单价")


class AddCustomLineRequest(QuoteRequest):
    """自定义披萨加入购物车"""
    crust_style: str = Field(CRUST_STYLES[0], description="饼底")
    crust_edge: str = Field(CRUST_EDGES[0], description="饼边")
    display_name: str = Field("Mi Za personalizada", min_length=1, max_length=80, description="展示名称")

    def to_build(self) -> PizzaBuild:
        return PizzaBuild(
            size=self.size,
            crust_style=self.crust_style,
            crust_edge=self.crust_edge,
            display_name=self.display_name,
            selections=self.pairs(),
        )


class AddProductLineRequest(BaseModel):
    """菜单披萨加入购物车"""
    product_id: int = Field(..., description="商品ID")
    quantity: int = Field(1, ge=1, le=20, description="数量")
    size: PizzaSize = Field(PizzaSize.MEDIUM, description="尺寸")
    crust_style: str = Field(CRUST_STYLES[0], description="饼底")
    crust_edge: str = Field(CRUST_EDGES[0], description="饼边")


class UpdateQuantityRequest(BaseModel):
    """修改数量请求，数量 <= 0 表示删除"""
    quantity: int = Field(..., le=99, description="新数量")


class CartResponse(BaseModel):
    """购物车内容"""
    lines: List[CartLine] = Field(..., description="购物车条目")
    total: int = Field(..., description="合计")
    currency: str = Field(..., description="币种")


class CartLineResponse(BaseModel):
    """单个条目操作结果，删除时 line 为空"""
    line: Optional[CartLine] = Field(None, description="购物车条目")
    removed: bool = Field(False, description="是否已删除")

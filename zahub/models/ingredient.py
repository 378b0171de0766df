"""
配料相关数据模型
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from .base import BaseEntity


class IngredientCategory(str, Enum):
    """配料分类，顺序即菜单展示顺序"""
    SAUCE = "sauce"
    CHEESE = "cheese"
    PROTEIN = "protein"
    VEGETABLE = "vegetable"
    EXTRA = "extra"
    CRUST = "crust"
    OTHER = "other"


CATEGORY_ORDER = [c.value for c in IngredientCategory]


class ModifierKind(str, Enum):
    """配料修饰类型"""
    INCLUDED = "INCLUDED"   # 正常添加，不影响价格
    EXTRA = "EXTRA"         # 加量，按配料加价计费
    EXCLUDED = "EXCLUDED"   # 去掉默认配料，不影响价格


class Ingredient(BaseEntity):
    """配料目录条目（只读）"""
    id: int = Field(..., description="配料ID")
    name: str = Field(..., description="名称")
    category: IngredientCategory = Field(IngredientCategory.OTHER, description="分类")
    extra_charge: int = Field(0, ge=0, description="加量费用")
    active: bool = Field(True, description="是否上架")

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> str:
        value = str(value or "").strip().lower()
        return value if value in CATEGORY_ORDER else IngredientCategory.OTHER.value


class IngredientModifier(BaseEntity):
    """某个购物车/订单条目上的一条配料修饰"""
    id: Optional[int] = Field(None, description="修饰ID")
    line_id: int = Field(..., description="所属条目ID")
    ingredient_id: int = Field(..., description="配料ID")
    kind: ModifierKind = Field(..., description="修饰类型")
    extra_charge: int = Field(0, ge=0, description="加量费用快照")

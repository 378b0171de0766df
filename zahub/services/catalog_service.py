"""
菜单目录服务
提供配料、菜单商品、促销和组装选项的只读查询
"""

from typing import Any, Dict, Iterable, List

from ..core.database import db_manager
from ..core.exceptions import ProductNotFoundError, PromotionNotFoundError, RecordNotFoundError
from ..models.cart import CRUST_EDGES, CRUST_STYLES
from ..models.ingredient import CATEGORY_ORDER, Ingredient
from ..models.product import Product, Promotion
from .pricing import BASE_PRICE_BY_SIZE


class CatalogService:
    """目录服务类"""

    def __init__(self, db=None):
        self.db = db or db_manager

    def list_ingredients(self) -> List[Ingredient]:
        """上架配料，按分类顺序再按名称排序"""
        rows = self.db.select("ingredients", {"active": True}, order_by=["name"])
        ingredients = [Ingredient.model_validate(row) for row in rows]
        ingredients.sort(key=lambda ing: CATEGORY_ORDER.index(ing.category))
        return ingredients

    def group_ingredients(self) -> Dict[str, List[Ingredient]]:
        """按分类分组，只返回非空分类"""
        groups: Dict[str, List[Ingredient]] = {}
        for ingredient in self.list_ingredients():
            groups.setdefault(ingredient.category, []).append(ingredient)
        return groups

    def get_extra_charges(self, ingredient_ids: Iterable[Any]) -> Dict[int, int]:
        """配料ID -> 加量费用"""
        ids = list(set(ingredient_ids))
        if not ids:
            return {}
        rows = self.db.select("ingredients", {"id": ids}, columns=["id", "extra_charge"])
        return {row["id"]: row["extra_charge"] or 0 for row in rows}

    def list_products(self) -> List[Product]:
        rows = self.db.select("products", order_by=["created_at", "id"])
        return [Product.model_validate(row) for row in rows]

    def get_product(self, product_id: int) -> Product:
        try:
            row = self.db.select_one("products", {"id": product_id})
        except RecordNotFoundError:
            raise ProductNotFoundError(details={"product_id": product_id})
        return Product.model_validate(row)

    def list_promotions(self, limit: int = 20) -> List[Promotion]:
        """启用中的促销，按展示顺序排列"""
        rows = self.db.select("promotions", {"is_active": True}, order_by=["sort_order", "id"])
        return [Promotion.model_validate(row) for row in rows[:limit]]

    def get_promotion(self, promotion_id: int) -> Promotion:
        try:
            row = self.db.select_one("promotions", {"id": promotion_id})
        except RecordNotFoundError:
            raise PromotionNotFoundError(details={"promotion_id": promotion_id})
        return Promotion.model_validate(row)

    def build_options(self) -> Dict[str, Any]:
        """组装披萨时的可选项"""
        return {
            "sizes": [
                {"size": size.value, "base_price": price}
                for size, price in BASE_PRICE_BY_SIZE.items()
            ],
            "crust_styles": list(CRUST_STYLES),
            "crust_edges": list(CRUST_EDGES),
            "categories": list(CATEGORY_ORDER),
        }


catalog_service = CatalogService()

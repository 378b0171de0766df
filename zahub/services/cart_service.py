"""
购物车服务模块
以应用用户为单位维护购物车条目及其配料修饰

业务规则：
- 小计在每次写入前都由已存储单价 × 数量重新计算，不信任调用方传入的值
- 新增条目时先写条目，再逐条写配料修饰；修饰写入失败只记录日志，条目保留
- 删除条目/清空购物车时先删修饰再删条目；修饰删除失败只记录日志，条目照删
- 遗留的孤立修饰不会被读到，读取时始终按现存条目关联
"""

from typing import Dict, List, Optional

import structlog

from ..core.database import db_manager
from ..core.exceptions import (
    CartLineNotFoundError,
    DatabaseError,
    NotAuthenticatedError,
    RecordNotFoundError,
    ValidationError,
)
from ..models.cart import CRUST_EDGES, CRUST_STYLES, CartLine, PizzaBuild, PizzaSize
from ..models.ingredient import IngredientModifier, ModifierKind
from .catalog_service import CatalogService
from .pricing import compute_unit_price, line_subtotal, order_total
from .selection import IngredientSelection

logger = structlog.get_logger(__name__)


def require_user_id(user_id: Optional[int]) -> int:
    if user_id is None:
        raise NotAuthenticatedError()
    return user_id


class CartService:
    """购物车服务类"""

    def __init__(self, db=None, catalog: CatalogService = None):
        self.db = db or db_manager
        self.catalog = catalog or CatalogService(self.db)

    # ---- 查询 ----

    def list_lines(self, user_id: Optional[int]) -> List[CartLine]:
        """按创建时间升序返回用户的购物车条目（含配料修饰）"""
        require_user_id(user_id)
        rows = self.db.select("cart_line", {"user_id": user_id}, order_by=["created_at", "id"])
        if not rows:
            return []
        modifiers = self._modifiers_by_line([row["id"] for row in rows])
        return [self._to_line(row, modifiers.get(row["id"], [])) for row in rows]

    def get_line(self, user_id: Optional[int], line_id: int) -> CartLine:
        row = self._get_line_row(user_id, line_id)
        return self._to_line(row, self.list_modifiers(line_id))

    def list_modifiers(self, line_id: int) -> List[IngredientModifier]:
        return self._modifiers_by_line([line_id]).get(line_id, [])

    def cart_total(self, user_id: Optional[int]) -> int:
        return order_total(self.list_lines(user_id))

    # ---- 写入 ----

    def add_line(self, user_id: Optional[int], build: PizzaBuild) -> CartLine:
        """
        把一次自定义组装加入购物车

        Args:
            user_id: 应用用户ID
            build: 尺寸、饼底、饼边、名称及配料选择

        Returns:
            CartLine: 新建的购物车条目

        Raises:
            NotAuthenticatedError: 用户ID为空时
            ValidationError: 饼底或饼边不在可选项中时
        """
        require_user_id(user_id)
        self._validate_crust(build.crust_style, build.crust_edge)

        # 同一配料只保留最后一次选择
        selections = IngredientSelection.from_snapshot(build.selections).snapshot()
        charges = self.catalog.get_extra_charges(ingredient_id for ingredient_id, _ in selections)
        unknown = [ingredient_id for ingredient_id, _ in selections if ingredient_id not in charges]
        if unknown:
            logger.warning("Unknown ingredients in build", user_id=user_id, ingredient_ids=unknown)

        size = PizzaSize(build.size)
        unit_price = compute_unit_price(size, selections, charges)
        quantity = 1
        line_id = self.db.insert("cart_line", {
            "user_id": user_id,
            "base_product_id": None,
            "display_name": build.display_name,
            "size": size.value,
            "crust_style": build.crust_style,
            "crust_edge": build.crust_edge,
            "quantity": quantity,
            "unit_price": unit_price,
            "subtotal": line_subtotal(unit_price, quantity),
        })

        failed = []
        for ingredient_id, kind in selections:
            try:
                self.db.insert("cart_line_modifier", {
                    "cart_line_id": line_id,
                    "ingredient_id": ingredient_id,
                    "kind": kind.value,
                    "extra_charge": charges.get(ingredient_id, 0) if kind == ModifierKind.EXTRA else 0,
                })
            except DatabaseError as e:
                failed.append(ingredient_id)
                logger.warning(
                    "Failed to insert cart line modifier",
                    cart_line_id=line_id,
                    ingredient_id=ingredient_id,
                    error=e.message,
                )

        self.db.log_action(user_id, "cart_add", {
            "cart_line_id": line_id,
            "size": size.value,
            "unit_price": unit_price,
            "modifier_count": len(selections) - len(failed),
            "failed_modifiers": failed,
        })
        return self.get_line(user_id, line_id)

    def add_product_line(self, user_id: Optional[int], product_id: int, quantity: int = 1,
                         size: PizzaSize = PizzaSize.MEDIUM,
                         crust_style: str = CRUST_STYLES[0],
                         crust_edge: str = CRUST_EDGES[0]) -> CartLine:
        """把菜单上的固定款披萨按标价加入购物车"""
        require_user_id(user_id)
        if quantity < 1:
            raise ValidationError("数量必须大于0", details={"field": "quantity"})
        self._validate_crust(crust_style, crust_edge)
        product = self.catalog.get_product(product_id)

        line_id = self.db.insert("cart_line", {
            "user_id": user_id,
            "base_product_id": product.id,
            "display_name": product.name,
            "size": PizzaSize(size).value,
            "crust_style": crust_style,
            "crust_edge": crust_edge,
            "quantity": quantity,
            "unit_price": product.price,
            "subtotal": line_subtotal(product.price, quantity),
        })
        self.db.log_action(user_id, "cart_add", {
            "cart_line_id": line_id,
            "base_product_id": product.id,
            "quantity": quantity,
            "unit_price": product.price,
        })
        return self.get_line(user_id, line_id)

    def update_quantity(self, user_id: Optional[int], line_id: int,
                        new_quantity: int) -> Optional[CartLine]:
        """
        修改数量；数量 <= 0 等同于删除条目

        Returns:
            更新后的条目，删除时返回 None
        """
        if new_quantity <= 0:
            self.remove_line(user_id, line_id)
            return None

        line = self.get_line(user_id, line_id)
        subtotal = line_subtotal(line.unit_price, new_quantity)
        self.db.update_by_id("cart_line", line_id, {
            "quantity": new_quantity,
            "subtotal": subtotal,
        })
        return line.model_copy(update={"quantity": new_quantity, "subtotal": subtotal})

    def remove_line(self, user_id: Optional[int], line_id: int) -> None:
        """删除条目：先删配料修饰，再删条目"""
        self._get_line_row(user_id, line_id)
        try:
            self.db.delete_where("cart_line_modifier", {"cart_line_id": line_id})
        except DatabaseError as e:
            logger.warning("Failed to delete cart line modifiers", cart_line_id=line_id, error=e.message)
        self.db.delete_by_id("cart_line", line_id)
        self.db.log_action(user_id, "cart_remove", {"cart_line_id": line_id})

    def clear(self, user_id: Optional[int], strict: bool = False) -> int:
        """
        清空购物车

        Args:
            user_id: 应用用户ID
            strict: 为 True 时修饰删除失败直接抛出（用于事务内结算）

        Returns:
            int: 删除的条目数
        """
        require_user_id(user_id)
        line_ids = [row["id"] for row in self.db.select("cart_line", {"user_id": user_id}, columns=["id"])]
        if not line_ids:
            return 0
        try:
            self.db.delete_where("cart_line_modifier", {"cart_line_id": line_ids})
        except DatabaseError as e:
            if strict:
                raise
            logger.warning("Failed to delete cart modifiers", user_id=user_id, error=e.message)
        self.db.delete_where("cart_line", {"user_id": user_id})
        self.db.log_action(user_id, "cart_clear", {"cart_line_ids": line_ids})
        return len(line_ids)

    # ---- 内部方法 ----

    def _get_line_row(self, user_id: Optional[int], line_id: int) -> Dict:
        require_user_id(user_id)
        try:
            return self.db.select_one("cart_line", {"id": line_id, "user_id": user_id})
        except RecordNotFoundError:
            raise CartLineNotFoundError(details={"cart_line_id": line_id})

    def _modifiers_by_line(self, line_ids: List[int]) -> Dict[int, List[IngredientModifier]]:
        rows = self.db.select("cart_line_modifier", {"cart_line_id": line_ids}, order_by=["id"])
        grouped: Dict[int, List[IngredientModifier]] = {}
        for row in rows:
            grouped.setdefault(row["cart_line_id"], []).append(IngredientModifier(
                id=row["id"],
                line_id=row["cart_line_id"],
                ingredient_id=row["ingredient_id"],
                kind=row["kind"],
                extra_charge=row["extra_charge"] or 0,
            ))
        return grouped

    @staticmethod
    def _to_line(row: Dict, modifiers: List[IngredientModifier]) -> CartLine:
        return CartLine(**row, modifiers=modifiers)

    @staticmethod
    def _validate_crust(crust_style: str, crust_edge: str) -> None:
        if crust_style not in CRUST_STYLES:
            raise ValidationError(
                f"不支持的饼底: {crust_style}",
                details={"field": "crust_style", "allowed": CRUST_STYLES},
            )
        if crust_edge not in CRUST_EDGES:
            raise ValidationError(
                f"不支持的饼边: {crust_edge}",
                details={"field": "crust_edge", "allowed": CRUST_EDGES},
            )


cart_service = CartService()

"""
订单查询服务
订单创建后即为快照，这里只提供只读查询
"""

from typing import Dict, List, Optional

from ..core.database import db_manager
from ..core.exceptions import OrderNotFoundError, RecordNotFoundError
from ..models.ingredient import IngredientModifier
from ..models.order import Order, OrderLine
from .cart_service import require_user_id


class OrderService:
    """订单查询服务类"""

    def __init__(self, db=None):
        self.db = db or db_manager

    def list_orders(self, user_id: Optional[int]) -> List[Order]:
        """用户订单列表，最新在前（不含明细）"""
        require_user_id(user_id)
        rows = self.db.select("orders", {"client_id": user_id}, order_by=["-created_at", "-id"])
        return [Order(**row) for row in rows]

    def get_order(self, user_id: Optional[int], order_id: int) -> Order:
        """订单详情（含明细及配料快照）"""
        require_user_id(user_id)
        try:
            row = self.db.select_one("orders", {"id": order_id, "client_id": user_id})
        except RecordNotFoundError:
            raise OrderNotFoundError(details={"order_id": order_id})

        line_rows = self.db.select("order_line", {"order_id": order_id}, order_by=["id"])
        modifiers = self._modifiers_by_line([r["id"] for r in line_rows])
        lines = [OrderLine(**r, modifiers=modifiers.get(r["id"], [])) for r in line_rows]
        return Order(**row, lines=lines)

    def _modifiers_by_line(self, line_ids: List[int]) -> Dict[int, List[IngredientModifier]]:
        rows = self.db.select("order_line_modifier", {"order_line_id": line_ids}, order_by=["id"])
        grouped: Dict[int, List[IngredientModifier]] = {}
        for row in rows:
            grouped.setdefault(row["order_line_id"], []).append(IngredientModifier(
                id=row["id"],
                line_id=row["order_line_id"],
                ingredient_id=row["ingredient_id"],
                kind=row["kind"],
                extra_charge=row["extra_charge"] or 0,
            ))
        return grouped


order_service = OrderService()

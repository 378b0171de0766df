"""
结算服务模块
把用户购物车中的全部条目转换为一笔订单（订单 + 订单明细 + 明细配料快照），然后清空购物车

流程：
1. 读取购物车条目，空车直接拒绝
2. 订单总额 = 各条目已存储小计之和（单价 × 数量仅做核对）
3. 写入 PENDING 订单，失败则整个结算失败
4. 逐条写入订单明细及其配料快照
5. 清空购物车
6. 返回订单ID

两种一致性策略（settings.checkout_atomic）：
- 尽力而为（默认）：单条明细或配料写入失败只记录日志并跳过，订单照常创建，购物车照常清空
- 原子：第3~5步放在同一事务中，任一步失败全部回滚，购物车保持不变
"""

from typing import List, Optional

import structlog

from ..config.settings import settings
from ..core.database import db_manager
from ..core.exceptions import CheckoutFailedError, DatabaseError, EmptyCartError
from ..models.cart import CartLine
from ..models.order import OrderStatus
from .cart_service import CartService, require_user_id
from .pricing import line_subtotal, order_total

logger = structlog.get_logger(__name__)


class CheckoutService:
    """结算服务类"""

    def __init__(self, db=None, cart: CartService = None, atomic: bool = None):
        self.db = db or db_manager
        self.cart = cart or CartService(self.db)
        self._atomic = atomic

    @property
    def atomic(self) -> bool:
        return settings.checkout_atomic if self._atomic is None else self._atomic

    def checkout(self, user_id: Optional[int], delivery_address: str = None) -> int:
        """
        结算购物车并创建订单

        Args:
            user_id: 应用用户ID
            delivery_address: 配送地址，缺省使用配置中的占位地址

        Returns:
            int: 新订单ID

        Raises:
            NotAuthenticatedError: 用户ID为空时
            EmptyCartError: 购物车为空时
            CheckoutFailedError: 订单写入失败（原子模式下任一步失败）时
        """
        require_user_id(user_id)
        lines = self.cart.list_lines(user_id)
        if not lines:
            raise EmptyCartError()

        total = order_total(lines)
        self._cross_check(user_id, lines)
        address = delivery_address or settings.default_delivery_address

        if self.atomic:
            order_id, failed = self._checkout_atomic(user_id, lines, total, address)
        else:
            order_id, failed = self._checkout_best_effort(user_id, lines, total, address)

        self.db.log_action(user_id, "order_checkout", {
            "order_id": order_id,
            "total": total,
            "line_count": len(lines),
            "failed_cart_line_ids": failed,
            "atomic": self.atomic,
        })
        logger.info(
            "Order created from cart",
            order_id=order_id,
            user_id=user_id,
            total=total,
            line_count=len(lines),
            failed_lines=len(failed),
        )
        return order_id

    def _checkout_best_effort(self, user_id: int, lines: List[CartLine],
                              total: int, address: str) -> tuple:
        order_id = self._create_order(user_id, total, address)

        failed = []
        for line in lines:
            try:
                order_line_id = self._copy_line(order_id, line)
            except DatabaseError as e:
                failed.append(line.id)
                logger.warning(
                    "Failed to copy cart line into order",
                    order_id=order_id,
                    cart_line_id=line.id,
                    error=e.message,
                )
                continue
            self._copy_modifiers(line.id, order_line_id, strict=False)

        # 无论明细是否全部成功都清空，避免用户重试时重复下单
        try:
            self.cart.clear(user_id)
        except DatabaseError as e:
            logger.warning("Failed to clear cart after checkout", order_id=order_id, user_id=user_id, error=e.message)
        return order_id, failed

    def _checkout_atomic(self, user_id: int, lines: List[CartLine],
                         total: int, address: str) -> tuple:
        try:
            with self.db.transaction():
                order_id = self._create_order(user_id, total, address)
                for line in lines:
                    order_line_id = self._copy_line(order_id, line)
                    self._copy_modifiers(line.id, order_line_id, strict=True)
                self.cart.clear(user_id, strict=True)
        except CheckoutFailedError:
            raise
        except DatabaseError as e:
            logger.warning("Atomic checkout rolled back", user_id=user_id, error=e.message)
            raise CheckoutFailedError(details={"reason": e.message})
        return order_id, []

    def _create_order(self, user_id: int, total: int, address: str) -> int:
        try:
            return self.db.insert("orders", {
                "client_id": user_id,
                "status": OrderStatus.PENDING.value,
                "total": total,
                "delivery_address": address,
                "channel": settings.order_channel,
                "assigned_agent_id": None,
            })
        except DatabaseError as e:
            logger.error("Failed to create order", user_id=user_id, total=total, error=e.message)
            raise CheckoutFailedError(details={"reason": e.message})

    def _copy_line(self, order_id: int, line: CartLine) -> int:
        return self.db.insert("order_line", {
            "order_id": order_id,
            "base_product_id": line.base_product_id,
            "display_name": line.display_name,
            "size": line.size,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
            "subtotal": line.subtotal,
        })

    def _copy_modifiers(self, cart_line_id: int, order_line_id: int, strict: bool) -> None:
        """重新读取购物车条目的配料修饰并复制到订单明细"""
        try:
            modifiers = self.cart.list_modifiers(cart_line_id)
        except DatabaseError as e:
            if strict:
                raise
            logger.warning("Failed to read cart line modifiers", cart_line_id=cart_line_id, error=e.message)
            return

        for modifier in modifiers:
            try:
                self.db.insert("order_line_modifier", {
                    "order_line_id": order_line_id,
                    "ingredient_id": modifier.ingredient_id,
                    "kind": modifier.kind,
                    "extra_charge": modifier.extra_charge,
                })
            except DatabaseError as e:
                if strict:
                    raise
                logger.warning(
                    "Failed to copy order line modifier",
                    order_line_id=order_line_id,
                    ingredient_id=modifier.ingredient_id,
                    error=e.message,
                )

    @staticmethod
    def _cross_check(user_id: int, lines: List[CartLine]) -> None:
        """核对小计与单价×数量是否一致，不一致只记录，不修正"""
        for line in lines:
            expected = line_subtotal(line.unit_price, line.quantity)
            if line.subtotal != expected:
                logger.warning(
                    "Cart line subtotal mismatch",
                    user_id=user_id,
                    cart_line_id=line.id,
                    stored=line.subtotal,
                    expected=expected,
                )


checkout_service = CheckoutService()

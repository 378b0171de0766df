"""
价格计算模块
根据尺寸和配料选择计算单价，纯函数、无副作用

计价规则：
- 基础价格按尺寸查表
- 每个标记为 EXTRA 的配料加上该配料的加量费用
- INCLUDED / EXCLUDED 不影响价格
- 金额均为最小货币单位的整数，保证精确
"""

from typing import Any, Iterable, Mapping, Tuple

from ..models.cart import PizzaSize
from ..models.ingredient import ModifierKind

BASE_PRICE_BY_SIZE = {
    PizzaSize.SMALL: 22000,
    PizzaSize.MEDIUM: 28000,
    PizzaSize.LARGE: 35000,
}


def base_price(size) -> int:
    """尺寸基础价格；未定义的尺寸会抛出 ValueError"""
    return BASE_PRICE_BY_SIZE[PizzaSize(size)]


def compute_unit_price(size, selections: Iterable[Tuple[Any, Any]],
                       extra_charges: Mapping[Any, int]) -> int:
    """
    计算单价

    Args:
        size: 披萨尺寸
        selections: (配料ID, 修饰类型) 序列
        extra_charges: 配料ID -> 加量费用，不在表中的配料按0计

    Returns:
        int: 单价
    """
    extras = 0
    for ingredient_id, kind in selections:
        if ModifierKind(kind) == ModifierKind.EXTRA:
            extras += int(extra_charges.get(ingredient_id, 0))
    return base_price(size) + extras


def line_subtotal(unit_price: int, quantity: int) -> int:
    return unit_price * quantity


def order_total(lines) -> int:
    """订单总额：各条目已存储小计之和"""
    return sum(line.subtotal for line in lines)

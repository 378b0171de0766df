"""
配料选择状态机
每次点击配料在固定的四态环上前进一步：
未选 -> INCLUDED -> EXTRA -> EXCLUDED -> 未选

"未选" 用配料不在映射中表示，不会被持久化
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..models.ingredient import ModifierKind

_NEXT_STATE = {
    None: ModifierKind.INCLUDED,
    ModifierKind.INCLUDED: ModifierKind.EXTRA,
    ModifierKind.EXTRA: ModifierKind.EXCLUDED,
    ModifierKind.EXCLUDED: None,
}


class IngredientSelection:
    """一次披萨组装过程中的配料选择"""

    def __init__(self):
        self._selected: Dict[Any, ModifierKind] = {}

    @classmethod
    def from_snapshot(cls, pairs: Iterable[Tuple[Any, Any]]) -> "IngredientSelection":
        """从 (配料ID, 修饰类型) 序列恢复选择状态"""
        selection = cls()
        for ingredient_id, kind in pairs:
            selection._selected[ingredient_id] = ModifierKind(kind)
        return selection

    def toggle(self, ingredient_id: Any) -> None:
        """前进一步；未知配料从 INCLUDED 开始"""
        next_state = _NEXT_STATE[self._selected.get(ingredient_id)]
        if next_state is None:
            del self._selected[ingredient_id]
        else:
            self._selected[ingredient_id] = next_state

    def state_of(self, ingredient_id: Any) -> Optional[ModifierKind]:
        return self._selected.get(ingredient_id)

    def snapshot(self) -> List[Tuple[Any, ModifierKind]]:
        """当前非未选状态的配料，按插入顺序"""
        return list(self._selected.items())

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, ingredient_id: Any) -> bool:
        return ingredient_id in self._selected

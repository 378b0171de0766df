"""
配料选择状态机测试
"""

import pytest

from ..models.ingredient import ModifierKind
from ..services.selection import IngredientSelection


class TestIngredientSelection:
    """四态循环测试"""

    def test_toggle_cycle(self):
        selection = IngredientSelection()

        selection.toggle(7)
        assert selection.state_of(7) == ModifierKind.INCLUDED
        selection.toggle(7)
        assert selection.state_of(7) == ModifierKind.EXTRA
        selection.toggle(7)
        assert selection.state_of(7) == ModifierKind.EXCLUDED
        selection.toggle(7)
        assert selection.state_of(7) is None
        assert 7 not in selection

    @pytest.mark.parametrize("ingredient_id", [1, 42, "sin-registrar"])
    def test_four_toggles_return_to_unset(self, ingredient_id):
        selection = IngredientSelection()
        for _ in range(4):
            selection.toggle(ingredient_id)
        assert selection.state_of(ingredient_id) is None
        assert len(selection) == 0

    def test_toggle_from_restored_state(self):
        selection = IngredientSelection.from_snapshot([(3, "EXTRA")])
        selection.toggle(3)
        assert selection.state_of(3) == ModifierKind.EXCLUDED

    def test_snapshot_keeps_insertion_order(self):
        selection = IngredientSelection()
        selection.toggle(5)
        selection.toggle(2)
        selection.toggle(2)
        assert selection.snapshot() == [(5, ModifierKind.INCLUDED), (2, ModifierKind.EXTRA)]

    def test_unset_ingredient_moves_to_end_when_reselected(self):
        selection = IngredientSelection()
        selection.toggle(1)
        selection.toggle(2)
        for _ in range(3):
            selection.toggle(1)
        selection.toggle(1)
        assert [ingredient_id for ingredient_id, _ in selection.snapshot()] == [2, 1]

    def test_independent_ingredients(self):
        selection = IngredientSelection()
        selection.toggle(1)
        selection.toggle(2)
        selection.toggle(2)
        assert selection.state_of(1) == ModifierKind.INCLUDED
        assert selection.state_of(2) == ModifierKind.EXTRA

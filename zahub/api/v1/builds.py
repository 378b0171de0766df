"""
披萨组装路由模块
客户端持有组装状态，每次点击配料或试算时把当前状态发给服务端计算
"""

from fastapi import APIRouter

from ...core.error_handler import create_success_response
from ...schemas.cart import QuoteRequest, QuoteResponse, SelectionItem, ToggleRequest
from ...services.catalog_service import catalog_service
from ...services.pricing import compute_unit_price
from ...services.selection import IngredientSelection

router = APIRouter()


def _quote(size, selection: IngredientSelection) -> QuoteResponse:
    pairs = selection.snapshot()
    charges = catalog_service.get_extra_charges(ingredient_id for ingredient_id, _ in pairs)
    return QuoteResponse(
        size=size,
        selections=[SelectionItem(ingredient_id=i, kind=k) for i, k in pairs],
        unit_price=compute_unit_price(size, pairs, charges),
    )


@router.post("/quote")
def quote_build(req: QuoteRequest):
    """按当前选择试算单价"""
    selection = IngredientSelection.from_snapshot(req.pairs())
    return create_success_response(data=_quote(req.size, selection).model_dump(mode="json"))


@router.post("/toggle")
def toggle_ingredient(req: ToggleRequest):
    """推进某个配料的选择状态并返回新的选择与单价"""
    selection = IngredientSelection.from_snapshot(req.pairs())
    selection.toggle(req.ingredient_id)
    return create_success_response(data=_quote(req.size, selection).model_dump(mode="json"))

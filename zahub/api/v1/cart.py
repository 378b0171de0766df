"""
购物车路由模块
"""

from fastapi import APIRouter, Depends

from ...config.settings import settings
from ...core.error_handler import create_success_response
from ...core.security import get_current_user_id
from ...schemas.cart import (
    AddCustomLineRequest,
    AddProductLineRequest,
    CartLineResponse,
    CartResponse,
    UpdateQuantityRequest,
)
from ...services.cart_service import cart_service
from ...services.pricing import order_total

router = APIRouter()


@router.get("")
def get_cart(user_id: int = Depends(get_current_user_id)):
    """当前用户的购物车"""
    lines = cart_service.list_lines(user_id)
    resp = CartResponse(lines=lines, total=order_total(lines), currency=settings.currency)
    return create_success_response(data=resp.model_dump(mode="json"))


@router.post("/lines")
def add_custom_line(req: AddCustomLineRequest, user_id: int = Depends(get_current_user_id)):
    """把自定义披萨加入购物车"""
    line = cart_service.add_line(user_id, req.to_build())
    return create_success_response(data=line.model_dump(mode="json"), message="已加入购物车")


@router.post("/products")
def add_product_line(req: AddProductLineRequest, user_id: int = Depends(get_current_user_id)):
    """把菜单披萨加入购物车"""
    line = cart_service.add_product_line(
        user_id,
        req.product_id,
        quantity=req.quantity,
        size=req.size,
        crust_style=req.crust_style,
        crust_edge=req.crust_edge,
    )
    return create_success_response(data=line.model_dump(mode="json"), message="已加入购物车")


@router.patch("/lines/{line_id}")
def update_line_quantity(line_id: int, req: UpdateQuantityRequest,
                         user_id: int = Depends(get_current_user_id)):
    """修改条目数量，数量 <= 0 时删除条目"""
    line = cart_service.update_quantity(user_id, line_id, req.quantity)
    resp = CartLineResponse(line=line, removed=line is None)
    return create_success_response(data=resp.model_dump(mode="json"))


@router.delete("/lines/{line_id}")
def remove_line(line_id: int, user_id: int = Depends(get_current_user_id)):
    """删除购物车条目"""
    cart_service.remove_line(user_id, line_id)
    return create_success_response(data={"line_id": line_id}, message="已删除")


@router.delete("")
def clear_cart(user_id: int = Depends(get_current_user_id)):
    """清空购物车"""
    removed = cart_service.clear(user_id)
    return create_success_response(data={"removed": removed}, message="购物车已清空")

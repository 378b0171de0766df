"""
菜单目录路由模块
"""

from fastapi import APIRouter

from ...core.error_handler import create_success_response
from ...services.catalog_service import catalog_service

router = APIRouter()


@router.get("/ingredients")
def list_ingredients():
    """按分类分组的上架配料"""
    groups = catalog_service.group_ingredients()
    data = {
        category: [ing.model_dump(mode="json") for ing in items]
        for category, items in groups.items()
    }
    return create_success_response(data=data)


@router.get("/products")
def list_products():
    """菜单披萨列表"""
    products = catalog_service.list_products()
    return create_success_response(data=[p.model_dump(mode="json") for p in products])


@router.get("/products/{product_id}")
def get_product(product_id: int):
    """菜单披萨详情"""
    product = catalog_service.get_product(product_id)
    return create_success_response(data=product.model_dump(mode="json"))


@router.get("/promotions")
def list_promotions():
    """首页促销列表"""
    promotions = catalog_service.list_promotions()
    return create_success_response(data=[p.model_dump(mode="json") for p in promotions])


@router.get("/promotions/{promotion_id}")
def get_promotion(promotion_id: int):
    """促销详情"""
    promotion = catalog_service.get_promotion(promotion_id)
    return create_success_response(data=promotion.model_dump(mode="json"))


@router.get("/options")
def get_build_options():
    """尺寸、饼底、饼边等组装选项"""
    return create_success_response(data=catalog_service.build_options())

"""
API routes and endpoints.
"""

from fastapi import APIRouter
from .v1 import builds, cart, catalog, orders, users

api_router = APIRouter()

# 包含所有v1路由
api_router.include_router(catalog.router, prefix="/catalog", tags=["菜单"])
api_router.include_router(builds.router, prefix="/builds", tags=["组装"])
api_router.include_router(cart.router, prefix="/cart", tags=["购物车"])
api_router.include_router(orders.router, prefix="/orders", tags=["订单"])
api_router.include_router(users.router, prefix="/users", tags=["用户"])

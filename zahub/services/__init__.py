"""
Business logic services.
Contains service layer implementations for the cart and order domain.
"""

from .catalog_service import CatalogService, catalog_service
from .cart_service import CartService, cart_service
from .checkout_service import CheckoutService, checkout_service
from .order_service import OrderService, order_service
from .user_service import UserService, user_service

__all__ = [
    "CatalogService",
    "CartService",
    "CheckoutService",
    "OrderService",
    "UserService",
    "catalog_service",
    "cart_service",
    "checkout_service",
    "order_service",
    "user_service",
]

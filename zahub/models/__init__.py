"""
Domain models.
"""

from .ingredient import Ingredient, IngredientCategory, ModifierKind, IngredientModifier
from .cart import PizzaSize, PizzaBuild, CartLine, CRUST_STYLES, CRUST_EDGES
from .order import Order, OrderLine, OrderStatus
from .product import Product, Promotion
from .user import AppUser

__all__ = [
    "Ingredient",
    "IngredientCategory",
    "ModifierKind",
    "IngredientModifier",
    "PizzaSize",
    "PizzaBuild",
    "CartLine",
    "CRUST_STYLES",
    "CRUST_EDGES",
    "Order",
    "OrderLine",
    "OrderStatus",
    "Product",
    "Promotion",
    "AppUser",
]

# Models package - consolidated imports only
from .user import User, UserRole
from .product import Product, ProductVariant
from .orders import Order, OrderItem, OrderStatus

__all__ = [
    # User models
    "User",
    "UserRole",

    # Product models
    "Product",
    "ProductVariant",

    # Order models
    "Order",
    "OrderItem",
    "OrderStatus",
]

"""SQLAlchemy models and closed enumerations for the storefront."""

from storefront.models.role import Permission, RoleType
from storefront.models.product import Product
from storefront.models.order import Order, OrderItem, OrderStatus

__all__ = [
    "Permission",
    "RoleType",
    "Product",
    "Order",
    "OrderItem",
    "OrderStatus",
]

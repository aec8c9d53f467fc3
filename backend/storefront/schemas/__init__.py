from storefront.schemas.auth import AccessSummary, RouteCheckResponse, Subject
from storefront.schemas.order import (
    CartLine,
    OrderCreate,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from storefront.schemas.product import (
    DashboardStats,
    InventoryStats,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)

__all__ = [
    "AccessSummary",
    "CartLine",
    "DashboardStats",
    "InventoryStats",
    "OrderCreate",
    "OrderItemResponse",
    "OrderListResponse",
    "OrderResponse",
    "OrderStatusUpdate",
    "ProductCreate",
    "ProductListResponse",
    "ProductResponse",
    "ProductUpdate",
    "RouteCheckResponse",
    "Subject",
]

"""Dashboard figures, computed over the caller's order scope."""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.models.order import Order, OrderStatus
from storefront.models.product import Product
from storefront.models.role import Permission, RoleType
from storefront.rbac import AccessControl
from storefront.schemas.auth import Subject
from storefront.schemas.product import DashboardStats, InventoryStats
from storefront.services.authz import ensure_permission


class DashboardService:
    def __init__(
        self,
        db: AsyncSession,
        access: AccessControl,
        low_stock_threshold: int | None = None,
    ):
        self.db = db
        self.access = access
        self.low_stock_threshold = (
            settings.LOW_STOCK_THRESHOLD if low_stock_threshold is None else low_stock_threshold
        )

    async def get_stats(self, subject: Subject) -> DashboardStats:
        ensure_permission(self.access.gate, subject, Permission.VIEW_DASHBOARD)
        scope = self.access.scopes.for_orders(subject)

        total_orders = await self.db.scalar(scope.apply(select(func.count(Order.id)), Order))
        revenue = await self.db.scalar(
            scope.apply(
                select(func.coalesce(func.sum(Order.total), 0)).where(
                    Order.status == OrderStatus.COMPLETED
                ),
                Order,
            )
        )
        pending = await self.db.scalar(
            scope.apply(
                select(func.count(Order.id)).where(Order.status == OrderStatus.PENDING), Order
            )
        )

        inventory = None
        if self.access.gate.can_access(subject.roles, Permission.EDIT_PRODUCT):
            inventory = InventoryStats(
                total_products=await self.db.scalar(select(func.count(Product.id))) or 0,
                low_stock_products=await self.db.scalar(
                    select(func.count(Product.id)).where(Product.stock <= self.low_stock_threshold)
                ) or 0,
            )

        return DashboardStats(
            total_orders=total_orders or 0,
            completed_revenue=Decimal(str(revenue or 0)),
            pending_orders=pending or 0,
            inventory=inventory,
            # Labeling only: the superadmin panel adds nothing the permissions don't already allow
            system_overview=self.access.hierarchy.any_at_least(subject.roles, RoleType.SUPERADMIN),
        )

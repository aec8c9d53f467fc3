"""Order workflows: permission check, then scope, then the data operation."""

import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.errors import NotFoundError, OrderValidationError, OwnershipMismatchError
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.product import Product
from storefront.models.role import Permission, RoleType
from storefront.rbac import AccessControl
from storefront.schemas.auth import Subject
from storefront.schemas.order import CartLine
from storefront.services.authz import ensure_permission

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, db: AsyncSession, access: AccessControl):
        self.db = db
        self.gate = access.gate
        self.scopes = access.scopes

    async def _load_orderable_products(self, cart: Sequence[CartLine]) -> dict[UUID, Product]:
        product_ids = {line.product_id for line in cart}
        result = await self.db.execute(
            select(Product).where(
                Product.id.in_(product_ids),
                Product.is_active == True,  # noqa: E712
                Product.is_archived == False,  # noqa: E712
            )
        )
        products = {p.id: p for p in result.scalars().all()}

        missing_ids = product_ids - set(products)
        if missing_ids:
            raise NotFoundError(
                "Products not found or not available",
                details={"product_ids": sorted(str(i) for i in missing_ids)},
            )
        return products

    @staticmethod
    def _validate_order(
        quantities: dict[UUID, int], products: dict[UUID, Product], total: Decimal
    ) -> None:
        """Checkout rules, applied to quantities summed per product."""
        for product_id, quantity in quantities.items():
            product = products[product_id]
            if quantity > product.stock:
                raise OrderValidationError(
                    f"{product.name} - Only {product.stock} available (you have {quantity})",
                    code="EXCEEDS_STOCK",
                    details={"product_id": str(product_id), "available": product.stock},
                )
            if quantity > settings.MAX_QUANTITY_PER_ITEM:
                raise OrderValidationError(
                    f"Maximum {settings.MAX_QUANTITY_PER_ITEM} of this item allowed per order",
                    code="EXCEEDS_ITEM_LIMIT",
                    details={"product_id": str(product_id)},
                )

        total_items = sum(quantities.values())
        if total_items > settings.MAX_ITEMS_PER_ORDER:
            raise OrderValidationError(
                f"Order cannot exceed {settings.MAX_ITEMS_PER_ORDER} total items "
                f"(you have {total_items})",
                code="EXCEEDS_ITEMS_LIMIT",
            )
        if total > settings.MAX_ORDER_AMOUNT:
            raise OrderValidationError(
                f"Order amount cannot exceed {settings.MAX_ORDER_AMOUNT:.2f}",
                code="EXCEEDS_MAXIMUM",
            )

    async def create_order(
        self,
        target_user_id: str | None,
        cart: Sequence[CartLine],
        subject: Subject,
        cashier_id: str | None = None,
        shipping_address: dict[str, Any] | None = None,
    ) -> Order:
        """Create an order for ``target_user_id`` from a cart snapshot.

        Customers may only order for themselves. Each line's unit price is the
        catalog price right now, copied into the order item. Header and items
        are written in one flush, so either both land or neither does.
        """
        ensure_permission(self.gate, subject, Permission.CREATE_ORDER)

        # Narrower than the permission check: plain customers order for themselves
        if subject.roles == {RoleType.USER} and target_user_id != subject.id:
            logger.warning(
                "Ownership mismatch: subject=%s tried to order for user=%s",
                subject.id, target_user_id,
            )
            raise OwnershipMismatchError("You can only create orders for yourself")

        products = await self._load_orderable_products(cart)

        quantities: dict[UUID, int] = {}
        for line in cart:
            quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity
        total = sum(
            (products[pid].price * qty for pid, qty in quantities.items()), Decimal("0.00")
        )
        self._validate_order(quantities, products, total)

        order_items = []
        for line in cart:
            unit_price = products[line.product_id].price
            order_items.append(
                OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    subtotal=unit_price * line.quantity,
                )
            )

        order = Order(
            user_id=target_user_id,
            cashier_id=cashier_id,
            status=OrderStatus.PENDING,
            total=total,
            shipping_address=shipping_address,
            items=order_items,
        )

        self.db.add(order)
        try:
            await self.db.flush()
        except SQLAlchemyError:
            # Not retried here: a blind retry could duplicate the order
            logger.exception("Failed to persist order for user=%s", target_user_id)
            await self.db.rollback()
            raise
        await self.db.refresh(order)

        logger.info(
            "Order %s created: user=%s cashier=%s total=%s items=%d",
            order.id, order.user_id, order.cashier_id, order.total, len(order_items),
        )
        return order

    def _ensure_can_read_orders(self, subject: Subject) -> None:
        # Cashiers and customers are scoped down, never gated out
        if not self.gate.can_access(subject.roles, Permission.VIEW_ALL_ORDERS):
            ensure_permission(self.gate, subject, Permission.VIEW_OWN_ORDERS)

    async def list_orders(
        self,
        subject: Subject,
        status: OrderStatus | None = None,
        page: int = 1,
        size: int = 50,
    ) -> tuple[list[Order], int]:
        self._ensure_can_read_orders(subject)
        scope = self.scopes.for_orders(subject)

        query = scope.apply(select(Order), Order)
        if status is not None:
            query = query.where(Order.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar_one()

        query = query.order_by(Order.created_at.desc()).offset((page - 1) * size).limit(size)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def get_order(self, order_id: UUID, subject: Subject) -> Order:
        self._ensure_can_read_orders(subject)

        order = await self.db.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order not found")
        if not self.scopes.for_orders(subject).matches(order):
            raise OwnershipMismatchError("You do not have permission to view this order")
        return order

    async def update_order_status(
        self, order_id: UUID, new_status: OrderStatus, subject: Subject
    ) -> Order:
        """Any staff member holding ``update_order_status`` may move any order.

        Ownership is left alone: ``cashier_id`` keeps pointing at the staff
        member who made the sale, and the acting subject is recorded in
        ``status_updated_by``.
        """
        ensure_permission(self.gate, subject, Permission.UPDATE_ORDER_STATUS)

        order = await self.db.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order not found")

        previous = order.status
        order.status = new_status
        order.status_updated_by = subject.id
        await self.db.flush()
        await self.db.refresh(order)

        logger.info(
            "Order %s status %s -> %s by %s",
            order.id, OrderStatus(previous).value, OrderStatus(new_status).value, subject.id,
        )
        return order

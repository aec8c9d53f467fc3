"""Order endpoints: checkout, point-of-sale, listing and status updates."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from storefront.core.deps import get_current_subject, get_order_service
from storefront.models.order import OrderStatus
from storefront.models.role import RoleType
from storefront.schemas.auth import Subject
from storefront.schemas.order import (
    OrderCreate, OrderListResponse, OrderResponse, OrderStatusUpdate,
)
from storefront.services.orders import OrderService

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    status: OrderStatus | None = None,
    subject: Subject = Depends(get_current_subject),
    service: OrderService = Depends(get_order_service),
):
    items, total = await service.list_orders(subject, status=status, page=page, size=size)
    return OrderListResponse(items=items, total=total, page=page, size=size)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    subject: Subject = Depends(get_current_subject),
    service: OrderService = Depends(get_order_service),
):
    return await service.get_order(order_id, subject)


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    data: OrderCreate,
    subject: Subject = Depends(get_current_subject),
    service: OrderService = Depends(get_order_service),
):
    """Customer checkout, or a sale rung up at the POS.

    A customer checking out without naming a user orders for themselves.
    Orders created by a cashier are attributed to that cashier.
    """
    target_user_id = data.user_id
    if target_user_id is None and subject.roles == {RoleType.USER}:
        target_user_id = subject.id
    cashier_id = subject.id if RoleType.CASHIER in subject.roles else None

    return await service.create_order(
        target_user_id,
        data.items,
        subject,
        cashier_id=cashier_id,
        shipping_address=data.shipping_address,
    )


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    data: OrderStatusUpdate,
    subject: Subject = Depends(get_current_subject),
    service: OrderService = Depends(get_order_service),
):
    return await service.update_order_status(order_id, data.status, subject)

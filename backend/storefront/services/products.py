"""Product workflows. Each mutation is gated on its own permission."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import NotFoundError, ReferentialConstraintError
from storefront.models.order import OrderItem
from storefront.models.product import Product
from storefront.models.role import Permission
from storefront.rbac import AccessControl
from storefront.schemas.auth import Subject
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.services.authz import ensure_permission

logger = logging.getLogger(__name__)


def _escape_like(s: str) -> str:
    """Escape SQL LIKE wildcards in user input."""
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductService:
    def __init__(self, db: AsyncSession, access: AccessControl):
        self.db = db
        self.gate = access.gate
        self.scopes = access.scopes

    async def _get_or_404(self, product_id: UUID) -> Product:
        product = await self.db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def list_products(
        self,
        subject: Subject,
        category_id: str | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Product], int]:
        """Guests and customers get the public catalog; staff get everything."""
        query = self.scopes.for_products(subject).apply(select(Product), Product)

        if category_id:
            query = query.where(Product.category_id == category_id)
        if search:
            like = f"%{_escape_like(search)}%"
            query = query.where(Product.name.ilike(like, escape="\\"))

        total = (await self.db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()

        query = query.order_by(Product.name).offset((page - 1) * page_size).limit(page_size)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def get_product(self, product_id: UUID, subject: Subject) -> Product:
        product = await self.db.get(Product, product_id)
        # Hidden products look exactly like missing ones to non-staff
        if product is None or not self.scopes.for_products(subject).matches(product):
            raise NotFoundError("Product not found")
        return product

    async def create_product(self, data: ProductCreate, subject: Subject) -> Product:
        ensure_permission(self.gate, subject, Permission.CREATE_PRODUCT)

        product = Product(**data.model_dump(), created_by=subject.id)
        self.db.add(product)
        await self.db.flush()
        await self.db.refresh(product)
        logger.info("Product %s created by %s", product.id, subject.id)
        return product

    async def update_product(
        self, product_id: UUID, data: ProductUpdate, subject: Subject
    ) -> Product:
        ensure_permission(self.gate, subject, Permission.EDIT_PRODUCT)

        product = await self._get_or_404(product_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(product, key, value)

        await self.db.flush()
        await self.db.refresh(product)
        return product

    async def archive_product(self, product_id: UUID, subject: Subject) -> Product:
        """Soft delete: hidden from customers, order history kept intact."""
        ensure_permission(self.gate, subject, Permission.DELETE_PRODUCT)

        product = await self._get_or_404(product_id)
        product.is_archived = True
        await self.db.flush()
        await self.db.refresh(product)
        logger.info("Product %s archived by %s", product.id, subject.id)
        return product

    async def unarchive_product(self, product_id: UUID, subject: Subject) -> Product:
        ensure_permission(self.gate, subject, Permission.EDIT_PRODUCT)

        product = await self._get_or_404(product_id)
        product.is_archived = False
        await self.db.flush()
        await self.db.refresh(product)
        logger.info("Product %s restored by %s", product.id, subject.id)
        return product

    async def delete_product(self, product_id: UUID, subject: Subject) -> None:
        """Hard delete, allowed only while no order line references the product."""
        ensure_permission(self.gate, subject, Permission.DELETE_PRODUCT)

        product = await self._get_or_404(product_id)
        referenced = await self.db.scalar(
            select(OrderItem.id).where(OrderItem.product_id == product_id).limit(1)
        )
        if referenced is not None:
            raise ReferentialConstraintError(
                "Product has order history and cannot be deleted. Archive it instead.",
                details={"product_id": str(product_id), "suggestion": "archive"},
            )

        await self.db.delete(product)
        await self.db.flush()
        logger.info("Product %s deleted by %s", product_id, subject.id)

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from storefront.core.deps import get_current_subject, get_product_service
from storefront.schemas.auth import Subject
from storefront.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, ProductListResponse,
)
from storefront.services.products import ProductService

router = APIRouter(prefix="/api/v1/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    category_id: str | None = None,
    search: str | None = None,
    subject: Subject = Depends(get_current_subject),
    service: ProductService = Depends(get_product_service),
):
    items, total = await service.list_products(
        subject, category_id=category_id, search=search, page=page, page_size=page_size
    )
    return ProductListResponse(items=items, total=total, page=page, page_size=page_size)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: UUID,
    subject: Subject = Depends(get_current_subject),
    service: ProductService = Depends(get_product_service),
):
    return await service.get_product(product_id, subject)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    data: ProductCreate,
    subject: Subject = Depends(get_current_subject),
    service: ProductService = Depends(get_product_service),
):
    return await service.create_product(data, subject)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    subject: Subject = Depends(get_current_subject),
    service: ProductService = Depends(get_product_service),
):
    return await service.update_product(product_id, data, subject)


@router.post("/{product_id}/archive", response_model=ProductResponse)
async def archive_product(
    product_id: UUID,
    subject: Subject = Depends(get_current_subject),
    service: ProductService = Depends(get_product_service),
):
    return await service.archive_product(product_id, subject)


@router.post("/{product_id}/unarchive", response_model=ProductResponse)
async def unarchive_product(
    product_id: UUID,
    subject: Subject = Depends(get_current_subject),
    service: ProductService = Depends(get_product_service),
):
    return await service.unarchive_product(product_id, subject)


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: UUID,
    subject: Subject = Depends(get_current_subject),
    service: ProductService = Depends(get_product_service),
):
    """Hard delete. Products that appear on any order must be archived instead."""
    await service.delete_product(product_id, subject)
    return Response(status_code=204)

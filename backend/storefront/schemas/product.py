from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


# ── Product ──
class ProductBase(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    category_id: Optional[str] = Field(None, max_length=64)

class ProductCreate(ProductBase):
    is_active: bool = True

class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[str] = Field(None, max_length=64)
    is_active: Optional[bool] = None

    @field_validator("name", "price", "stock", "is_active", mode="before")
    @classmethod
    def _reject_null(cls, value):
        # Omit a field to leave it unchanged; these columns are NOT NULL
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

class ProductResponse(ProductBase):
    id: UUID
    is_active: bool
    is_archived: bool
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = {"from_attributes": True}

class ProductListResponse(BaseModel):
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int


# ── Dashboard ──
class InventoryStats(BaseModel):
    total_products: int
    low_stock_products: int

class DashboardStats(BaseModel):
    total_orders: int
    completed_revenue: Decimal
    pending_orders: int
    inventory: Optional[InventoryStats] = None
    system_overview: bool = False

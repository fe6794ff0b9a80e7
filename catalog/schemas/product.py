"""Product Schemas - Pydantic models for the product API boundary.

Invariants:
    - ProductCreate is deliberately permissive: only JSON types are checked here,
      every business and format rule runs in the validation engine so that all
      messages are collected together
    - ProductUpdate carries field-level constraints (update skips the engine)
    - ProductView is a response projection, never persisted
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from catalog.core.domain_types import ProductCategory


class ProductCreate(BaseModel):
    """Unvalidated create request: mirrors the settable product fields."""
    name: str = ""
    brand: str = ""
    sku: str = ""
    category: str = ""
    price: Decimal | None = None
    release_date: datetime | None = None
    image_url: str | None = None
    stock_quantity: int = 1


class ProductUpdate(BaseModel):
    """Full replacement of a product's editable fields."""
    name: str = Field(min_length=1, max_length=200)
    brand: str = Field(min_length=2, max_length=100)
    sku: str = Field(pattern=r"^[A-Za-z0-9-]{5,20}$")
    category: ProductCategory
    price: Decimal = Field(gt=0, lt=10_000)
    release_date: datetime
    image_url: str | None = Field(None, max_length=2048)
    stock_quantity: int = Field(ge=0, le=100_000)

    @field_validator("name", "brand")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class ProductView(BaseModel):
    """Product response - persisted fields plus derived display fields."""
    id: UUID
    name: str
    brand: str
    sku: str
    category: str
    category_display_name: str
    price: Decimal
    formatted_price: str
    release_date: datetime
    created_at: datetime
    updated_at: datetime | None = None
    image_url: str | None = None
    is_available: bool
    stock_quantity: int
    product_age: str
    brand_initials: str
    availability_status: str

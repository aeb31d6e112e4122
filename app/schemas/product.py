from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import Optional


class ProductBase(BaseModel):
    """Base schema for Product with common attributes.

    Business rules (lengths, positive price, non-negative stock) are
    enforced by the service layer, which reports every failed rule at once.
    """
    name: str = Field(..., description="Product name, unique")
    sku: str = Field(..., description="Stock keeping unit, unique")
    description: Optional[str] = Field(None, description="Optional description")
    price: Decimal = Field(..., description="Product price (must be positive)")
    stock_quantity: int = Field(..., description="Available stock (must be non-negative)")
    category: str = Field(..., description="Product category")


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    pass


class ProductUpdate(ProductBase):
    """Schema for updating an existing product. Every field is replaced."""
    pass


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductSummary(BaseModel):
    """Compact product representation embedded in order responses."""
    id: int
    name: str
    sku: str
    price: Decimal
    stock_quantity: int

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for paginated product list response."""
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int

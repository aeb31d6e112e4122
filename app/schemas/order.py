from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime
from typing import Optional

from app.models.order import OrderStatus
from app.schemas.product import ProductResponse, ProductSummary


class OrderBase(BaseModel):
    """Base schema for Order with common attributes."""
    product_id: int = Field(..., description="ID of the ordered product")
    order_number: str = Field(..., description="Order number, ORD-YYYYMMDD-NNNN")
    customer_name: str = Field(..., description="Customer name")
    customer_email: str = Field(..., description="Customer email, unique")
    quantity: int = Field(..., description="Quantity ordered")
    order_date: date = Field(..., description="Date the order was placed")
    delivery_date: Optional[date] = Field(None, description="Delivery date, if delivered")


class OrderCreate(OrderBase):
    """Schema for creating a new order."""
    pass


class OrderUpdate(OrderBase):
    """Schema for updating an existing order. Every field is replaced."""
    pass


class OrderResponse(OrderBase):
    """Schema for order response."""
    id: int
    status: OrderStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderWithProduct(OrderResponse):
    """Schema for order response including product details."""
    product: ProductSummary


class OrderListResponse(BaseModel):
    """Schema for paginated order list response."""
    items: list[OrderWithProduct]
    total: int
    page: int
    page_size: int
    total_pages: int
    search: Optional[str] = None


class FieldErrorResponse(BaseModel):
    """A single failed validation rule."""
    field: str
    rule: str
    message: str


class OrderNumberCheckResponse(BaseModel):
    """Result of checking a candidate order number."""
    order_number: str
    is_valid_format: bool
    is_unique: bool


class StockCheckResponse(BaseModel):
    """Result of checking a product and requested quantity."""
    is_valid: bool
    message: str
    product: Optional[ProductResponse] = None

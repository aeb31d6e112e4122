from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.config import get_settings
from app.database import get_db
from app.api.errors import validation_error
from app.services.order_service import OrderService
from app.services.exceptions import (
    ConflictError,
    OrderNotFoundError,
    ValidationFailedError,
)
from app.schemas.order import (
    OrderCreate,
    OrderUpdate,
    OrderWithProduct,
    OrderListResponse,
    OrderNumberCheckResponse,
    StockCheckResponse,
)
from app.schemas.product import ProductResponse

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post(
    "/",
    response_model=OrderWithProduct,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new order",
    description="""
    Create an order for a single product.

    **Validation:**
    The order number must follow ORD-YYYYMMDD-NNNN with a real date and be
    unused, the product must exist with enough stock, the order date cannot
    be in the future and the delivery date cannot precede it. Every failed
    rule is returned in a 422 response.

    Stock is checked but not decremented.
    """
)
async def create_order(
    order_data: OrderCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Create an order.

    - **product_id**: ID of the ordered product (required)
    - **order_number**: ORD-YYYYMMDD-NNNN, unique (required)
    - **customer_name** / **customer_email**: customer details (required)
    - **quantity**: positive, at most the product's stock (required)
    - **order_date** / **delivery_date**: calendar dates
    """
    service = OrderService(db)

    try:
        return await service.create_order(order_data)
    except ValidationFailedError as e:
        raise validation_error(e)
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.get(
    "/",
    response_model=OrderListResponse,
    summary="List orders",
    description="Get a paginated list of orders, most recent first, with optional search."
)
async def list_orders(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"
    ),
    search: Optional[str] = Query(
        None, description="Search order number, customer name or customer email"
    ),
    db: AsyncSession = Depends(get_db)
):
    """Get paginated list of orders."""
    service = OrderService(db)
    result = await service.get_orders(page, page_size, search)

    return OrderListResponse(
        items=[OrderWithProduct.model_validate(o) for o in result.orders],
        total=result.total_records,
        page=result.current_page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        search=result.search_string
    )


@router.get(
    "/validate/order-number",
    response_model=OrderNumberCheckResponse,
    summary="Check an order number",
    description="Check an order number's format and whether it is still unused."
)
async def check_order_number(
    value: str = Query(..., description="Candidate order number"),
    db: AsyncSession = Depends(get_db)
):
    service = OrderService(db)
    return OrderNumberCheckResponse(
        order_number=value,
        is_valid_format=service.is_valid_order_number_format(value),
        is_unique=await service.is_order_number_unique(value)
    )


@router.get(
    "/validate/stock",
    response_model=StockCheckResponse,
    summary="Check product stock",
    description="Check that a product exists and has enough stock for a quantity."
)
async def check_stock(
    product_id: int = Query(..., description="Product ID"),
    quantity: int = Query(..., description="Requested quantity"),
    db: AsyncSession = Depends(get_db)
):
    service = OrderService(db)
    check = await service.validate_product_and_stock(product_id, quantity)

    return StockCheckResponse(
        is_valid=check.is_valid,
        message=check.message,
        product=ProductResponse.model_validate(check.product) if check.product else None
    )


@router.get(
    "/{order_id}",
    response_model=OrderWithProduct,
    summary="Get order by ID",
    description="Get detailed information about a specific order and its product."
)
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get an order by ID."""
    service = OrderService(db)
    order = await service.get_order(order_id)

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order with ID {order_id} not found"
        )

    return order


@router.put(
    "/{order_id}",
    response_model=OrderWithProduct,
    summary="Update an order",
    description="Replace every field of an order. The same rules as creation apply."
)
async def update_order(
    order_id: int,
    order_data: OrderUpdate,
    db: AsyncSession = Depends(get_db)
):
    service = OrderService(db)

    try:
        return await service.update_order(order_id, order_data)
    except OrderNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except ValidationFailedError as e:
        raise validation_error(e)
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an order",
    description="Delete an order by ID."
)
async def delete_order(
    order_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Delete an order."""
    service = OrderService(db)
    deleted = await service.delete_order(order_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order with ID {order_id} not found"
        )

    return None

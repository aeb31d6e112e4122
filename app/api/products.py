from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.config import get_settings
from app.database import get_db
from app.api.errors import validation_error
from app.services.product_service import ProductService
from app.services.exceptions import (
    ConflictError,
    ProductNotFoundError,
    ValidationFailedError,
)
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse
)
from app.schemas.order import OrderResponse

settings = get_settings()

router = APIRouter(prefix="/products", tags=["Products"])


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a new product. Name and SKU must be unique."
)
async def create_product(
    product_data: ProductCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new product.

    - **name**: 2-200 characters, unique (required)
    - **sku**: up to 50 characters, unique (required)
    - **price**: must be positive (required)
    - **stock_quantity**: must be non-negative (required)
    - **category**: up to 100 characters (required)
    """
    service = ProductService(db)

    try:
        return await service.create(product_data)
    except ValidationFailedError as e:
        raise validation_error(e)
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.get(
    "/",
    response_model=ProductListResponse,
    summary="List products",
    description="Get a paginated list of products with optional name search."
)
async def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"
    ),
    search: Optional[str] = Query(None, description="Search by product name"),
    db: AsyncSession = Depends(get_db)
):
    """Get paginated list of products."""
    service = ProductService(db)
    products, total, total_pages = await service.get_all(page, page_size, search)

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/all",
    response_model=list[ProductResponse],
    summary="List all products by name",
    description="Get every product sorted by name, e.g. for an order form's product picker."
)
async def list_all_products(db: AsyncSession = Depends(get_db)):
    service = ProductService(db)
    return await service.get_all_products()


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Get detailed information about a specific product."
)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a product by ID."""
    service = ProductService(db)
    product = await service.get_by_id(product_id)

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )

    return product


@router.get(
    "/{product_id}/orders",
    response_model=list[OrderResponse],
    summary="List a product's orders",
    description="Get the orders placed for a product, most recent first."
)
async def list_product_orders(
    product_id: int,
    db: AsyncSession = Depends(get_db)
):
    service = ProductService(db)

    try:
        return await service.get_orders_for_product(product_id)
    except ProductNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Replace every field of a product."
)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Update a product.

    All fields are required; the product is replaced as a whole.
    """
    service = ProductService(db)

    try:
        return await service.update(product_id, product_data)
    except ProductNotFoundError as e:
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
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    description="Delete a product by ID. Products with orders cannot be deleted."
)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Delete a product."""
    service = ProductService(db)

    try:
        deleted = await service.delete(product_id)
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )

    return None

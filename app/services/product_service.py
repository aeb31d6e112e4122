from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List, Tuple
import math
import logging

from app.models.product import Product
from app.models.order import Order
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.exceptions import (
    ConflictError,
    ProductInUseError,
    ProductNotFoundError,
    ValidationFailedError,
    conflict_message,
)
from app.services.validation import validate_product_fields

logger = logging.getLogger(__name__)

PRODUCT_CONFLICTS = {
    "sku": "SKU already exists",
    "name": "Product name already exists",
}


class ProductService:
    """
    Service class for Product operations.

    This service handles:
    - Creating and fully replacing products
    - Read-only lookups (by id, all by name, paginated search)
    - Deleting products that no order references
    - Explicit retrieval of a product's orders

    Name and SKU uniqueness are left to the database constraints; a
    violation surfaces as ConflictError.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Args:
            product_data: Product creation data

        Returns:
            Created product instance

        Raises:
            ValidationFailedError: If any field rule fails
            ConflictError: If the name or SKU is already taken
        """
        self._validate(product_data)

        product = Product(**product_data.model_dump())
        self.db.add(product)
        await self._commit()
        await self.db.refresh(product)

        logger.info(f"Product #{product.id} ({product.sku}) created")
        return product

    async def get_by_id(self, product_id: int) -> Optional[Product]:
        """
        Get a product by ID.

        Args:
            product_id: Product ID to look up

        Returns:
            Product instance or None if not found
        """
        result = await self.db.execute(select(Product).where(Product.id == product_id))
        return result.scalar_one_or_none()

    async def get_all_products(self) -> List[Product]:
        """Get every product sorted by name."""
        result = await self.db.execute(select(Product).order_by(Product.name.asc()))
        return list(result.scalars().all())

    async def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = None
    ) -> Tuple[List[Product], int, int]:
        """
        Get paginated list of products.

        Args:
            page: Page number (1-indexed)
            page_size: Number of items per page (values below 1 mean 1)
            search: Optional search term for product name

        Returns:
            Tuple of (products list, total count, total pages)
        """
        page_size = max(page_size, 1)
        query = select(Product)

        # Apply search filter if provided
        if search and search.strip():
            query = query.where(Product.name.icontains(search.strip(), autoescape=True))

        # Get total count
        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        # Apply pagination
        offset = (max(page, 1) - 1) * page_size
        result = await self.db.execute(
            query.order_by(Product.id.desc()).offset(offset).limit(page_size)
        )

        return list(result.scalars().all()), total, total_pages

    async def get_orders_for_product(self, product_id: int) -> List[Order]:
        """
        Get the orders placed for a product, most recent first.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        if await self.get_by_id(product_id) is None:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")

        result = await self.db.execute(
            select(Order)
            .where(Order.product_id == product_id)
            .order_by(Order.order_date.desc(), Order.id.desc())
        )
        return list(result.scalars().all())

    async def update(self, product_id: int, product_data: ProductUpdate) -> Product:
        """
        Replace every field of an existing product.

        Args:
            product_id: ID of product to update
            product_data: New field values

        Returns:
            Updated product

        Raises:
            ProductNotFoundError: If the product doesn't exist
            ValidationFailedError: If any field rule fails
            ConflictError: If the new name or SKU is already taken
        """
        product = await self.get_by_id(product_id)

        if not product:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")

        self._validate(product_data)

        for field, value in product_data.model_dump().items():
            setattr(product, field, value)

        await self._commit()
        await self.db.refresh(product)

        logger.info(f"Product #{product_id} updated")
        return product

    async def delete(self, product_id: int) -> bool:
        """
        Delete a product.

        Args:
            product_id: ID of product to delete

        Returns:
            True if deleted, False if not found

        Raises:
            ProductInUseError: If any order still references the product
        """
        product = await self.get_by_id(product_id)

        if not product:
            return False

        referenced = await self.db.scalar(
            select(Order.id).where(Order.product_id == product_id).limit(1)
        )
        if referenced is not None:
            raise ProductInUseError(
                f"Product with ID {product_id} has orders and cannot be deleted"
            )

        await self.db.delete(product)
        try:
            await self.db.commit()
        except IntegrityError as e:
            # An order was placed between the check and the delete
            await self.db.rollback()
            logger.warning(f"Delete of product #{product_id} rejected: {e.orig}")
            raise ProductInUseError(
                f"Product with ID {product_id} has orders and cannot be deleted"
            ) from e
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error deleting product #{product_id}: {e}")
            raise

        logger.info(f"Product #{product_id} deleted")
        return True

    def _validate(self, product_data: ProductCreate) -> None:
        errors = validate_product_fields(
            name=product_data.name,
            sku=product_data.sku,
            price=product_data.price,
            stock_quantity=product_data.stock_quantity,
            category=product_data.category,
            description=product_data.description,
        )
        if errors:
            raise ValidationFailedError(errors)

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Product write rejected by constraint: {e.orig}")
            raise ConflictError(
                conflict_message(e, PRODUCT_CONFLICTS, "Product conflicts with an existing product")
            ) from e
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error writing product: {e}")
            raise

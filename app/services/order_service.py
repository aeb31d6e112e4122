from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List
import math
import logging

from app.models.product import Product
from app.models.order import Order
from app.schemas.order import OrderCreate, OrderUpdate
from app.services.exceptions import (
    ConflictError,
    OrderNotFoundError,
    ValidationFailedError,
    conflict_message,
)
from app.services.validation import (
    MSG_INSUFFICIENT_STOCK,
    MSG_ORDER_DATE_IN_FUTURE,
    MSG_ORDER_NUMBER_TAKEN,
    MSG_PRODUCT_NOT_FOUND,
    MSG_QUANTITY_NOT_POSITIVE,
    DateCheck,
    FieldError,
    StockCheck,
    is_valid_order_number_format,
    validate_dates,
    validate_order_fields,
)

logger = logging.getLogger(__name__)

ORDER_CONFLICTS = {
    "order_number": MSG_ORDER_NUMBER_TAKEN,
    "customer_email": "Customer email already exists",
}


@dataclass
class OrderPage:
    """One page of the order listing plus what is needed to render pagination."""
    orders: List[Order] = field(default_factory=list)
    total_records: int = 0
    current_page: int = 1
    page_size: int = 10
    search_string: Optional[str] = None

    @property
    def total_pages(self) -> int:
        if self.total_records > 0 and self.page_size > 0:
            return math.ceil(self.total_records / self.page_size)
        return 1


class OrderService:
    """
    Service class for Order validation, queries and writes.

    VALIDATION VS. WRITES:
    ======================
    The validators (order number format and uniqueness, product and stock,
    dates) never raise for bad input; they return booleans or
    (is_valid, message[, product]) tuples so callers can show the message
    as-is.

    create_order / update_order run every validator, collect the failures
    and raise ValidationFailedError with the full list.

    Stock is checked, not reserved: placing an order never changes
    Product.stock_quantity, and two concurrent orders can both pass the
    check against the same stock.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def is_valid_order_number_format(order_number: Optional[str]) -> bool:
        """Check ORD-YYYYMMDD-NNNN with a real calendar date."""
        return is_valid_order_number_format(order_number)

    @staticmethod
    def validate_dates(order_date, delivery_date=None, today: Optional[date] = None) -> DateCheck:
        """Check that the order date is not in the future and delivery does not precede it."""
        return validate_dates(order_date, delivery_date, today)

    async def is_order_number_unique(
        self,
        order_number: Optional[str],
        exclude_order_id: Optional[int] = None
    ) -> bool:
        """
        Check that no stored order already uses this order number.

        Args:
            order_number: Candidate order number
            exclude_order_id: Order to ignore, used when an order keeps its own number

        Returns:
            False for a blank number or an existing match, True otherwise
        """
        if not order_number or not order_number.strip():
            return False

        query = select(Order.id).where(Order.order_number == order_number)
        if exclude_order_id is not None:
            query = query.where(Order.id != exclude_order_id)

        existing = await self.db.scalar(query.limit(1))
        return existing is None

    async def validate_product_and_stock(self, product_id: int, quantity: int) -> StockCheck:
        """
        Check that a product exists and has enough stock for the quantity.

        Existence is checked before the quantity, and a positive quantity
        before stock sufficiency.

        Args:
            product_id: ID of the product to order
            quantity: Requested quantity

        Returns:
            StockCheck(is_valid, message, product); product is None only
            when it doesn't exist
        """
        # Read current stock even if the session already holds this product
        result = await self.db.execute(
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        product = result.scalar_one_or_none()

        if product is None:
            return StockCheck(False, MSG_PRODUCT_NOT_FOUND, None)

        if quantity is None or quantity <= 0:
            return StockCheck(False, MSG_QUANTITY_NOT_POSITIVE, product)

        if quantity > product.stock_quantity:
            return StockCheck(
                False, MSG_INSUFFICIENT_STOCK.format(stock=product.stock_quantity), product
            )

        return StockCheck(True, "", product)

    async def get_orders(
        self,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None
    ) -> OrderPage:
        """
        Get a page of orders with their products, most recent order date first.

        Args:
            page: Page number (1-indexed, values below 1 mean 1)
            page_size: Items per page (values below 1 mean 1)
            search: Case-insensitive substring of order number, customer
                name or customer email

        Returns:
            OrderPage with the orders, total matching records and the
            trimmed search string (None when blank)
        """
        page = max(page, 1)
        page_size = max(page_size, 1)
        search = search.strip() if search and search.strip() else None

        conditions = []
        if search:
            conditions.append(or_(
                Order.order_number.icontains(search, autoescape=True),
                Order.customer_name.icontains(search, autoescape=True),
                Order.customer_email.icontains(search, autoescape=True),
            ))

        total = await self.db.scalar(
            select(func.count(Order.id)).where(*conditions)
        )

        offset = (page - 1) * page_size
        result = await self.db.execute(
            select(Order)
            .options(joinedload(Order.product))
            .where(*conditions)
            .order_by(Order.order_date.desc(), Order.id.desc())
            .offset(offset)
            .limit(page_size)
            .execution_options(populate_existing=True)
        )

        return OrderPage(
            orders=list(result.scalars().all()),
            total_records=total,
            current_page=page,
            page_size=page_size,
            search_string=search,
        )

    async def get_order(self, order_id: int) -> Optional[Order]:
        """Get an order by ID with its product loaded."""
        result = await self.db.execute(
            select(Order)
            .options(joinedload(Order.product))
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_order(self, order_data: OrderCreate) -> Order:
        """
        Validate and store a new order.

        Stock is only checked. The product's stock_quantity is left untouched.

        Args:
            order_data: Order creation data

        Returns:
            Created order with its product loaded

        Raises:
            ValidationFailedError: If any field or business rule fails
            ConflictError: If the order number or customer email is already taken
        """
        errors = await self._collect_errors(order_data)
        if errors:
            raise ValidationFailedError(errors)

        order = Order(**order_data.model_dump())
        self.db.add(order)
        await self._commit()

        logger.info(
            f"Order #{order.id} ({order.order_number}) created for product #{order.product_id}"
        )
        return await self.get_order(order.id)

    async def update_order(self, order_id: int, order_data: OrderUpdate) -> Order:
        """
        Replace every field of an existing order.

        Raises:
            OrderNotFoundError: If the order doesn't exist
            ValidationFailedError: If any field or business rule fails
            ConflictError: If the order number or customer email is already taken
        """
        order = await self.db.get(Order, order_id)

        if not order:
            raise OrderNotFoundError(f"Order with ID {order_id} not found")

        errors = await self._collect_errors(order_data, exclude_order_id=order_id)
        if errors:
            raise ValidationFailedError(errors)

        for name, value in order_data.model_dump().items():
            setattr(order, name, value)

        await self._commit()

        logger.info(f"Order #{order_id} updated")
        return await self.get_order(order_id)

    async def delete_order(self, order_id: int) -> bool:
        """
        Delete an order.

        Returns:
            True if deleted, False if not found
        """
        order = await self.db.get(Order, order_id)

        if not order:
            return False

        await self.db.delete(order)
        await self._commit()

        logger.info(f"Order #{order_id} deleted")
        return True

    async def _collect_errors(
        self,
        order_data: OrderCreate,
        exclude_order_id: Optional[int] = None
    ) -> List[FieldError]:
        errors = validate_order_fields(
            product_id=order_data.product_id,
            order_number=order_data.order_number,
            customer_name=order_data.customer_name,
            customer_email=order_data.customer_email,
            quantity=order_data.quantity,
            order_date=order_data.order_date,
        )
        failed = {error.field for error in errors}

        if "order_number" not in failed:
            unique = await self.is_order_number_unique(order_data.order_number, exclude_order_id)
            if not unique:
                errors.append(FieldError("order_number", "unique", MSG_ORDER_NUMBER_TAKEN))

        # A rejected quantity still gets the existence check
        if "product_id" not in failed:
            stock = await self.validate_product_and_stock(order_data.product_id, order_data.quantity)
            if not stock.is_valid:
                if stock.product is None:
                    errors.append(FieldError("product_id", "exists", stock.message))
                elif "quantity" not in failed:
                    errors.append(FieldError("quantity", "stock", stock.message))

        if "order_date" not in failed:
            dates = self.validate_dates(order_data.order_date, order_data.delivery_date)
            if not dates.is_valid:
                name = "order_date" if dates.message == MSG_ORDER_DATE_IN_FUTURE else "delivery_date"
                errors.append(FieldError(name, "date", dates.message))

        return errors

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Order write rejected by constraint: {e.orig}")
            raise ConflictError(
                conflict_message(e, ORDER_CONFLICTS, "Order conflicts with an existing order")
            ) from e
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error writing order: {e}")
            raise

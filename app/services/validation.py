"""
Explicit field and business-rule validation for products and orders.

Every function here is pure: no storage access and no exceptions for
invalid input. Callers receive structured results and decide what to do
with them.
"""
import re
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, NamedTuple, Optional, Union

from email_validator import EmailNotValidError, validate_email

if TYPE_CHECKING:
    from app.models.product import Product

ORDER_NUMBER_PATTERN = re.compile(r"ORD-(\d{4})(\d{2})(\d{2})-(\d{4})", re.ASCII)

MSG_PRODUCT_NOT_FOUND = "Sản phẩm không tồn tại"
MSG_QUANTITY_NOT_POSITIVE = "Số lượng phải lớn hơn 0"
MSG_INSUFFICIENT_STOCK = "Không đủ hàng. Còn lại: {stock}"
MSG_ORDER_DATE_IN_FUTURE = "Ngày đặt hàng không được trong tương lai"
MSG_DELIVERY_BEFORE_ORDER = "Ngày giao hàng phải sau hoặc bằng ngày đặt hàng"
MSG_ORDER_NUMBER_FORMAT = "Order number must follow the format ORD-YYYYMMDD-NNNN"
MSG_ORDER_NUMBER_TAKEN = "Order number already exists"

DateLike = Union[date, datetime]


class FieldError(NamedTuple):
    """A single failed rule: which field, which rule, and what to tell the user."""
    field: str
    rule: str
    message: str


class StockCheck(NamedTuple):
    """Tri-state result of a product and stock check."""
    is_valid: bool
    message: str
    product: Optional["Product"]


class DateCheck(NamedTuple):
    is_valid: bool
    message: str


def is_valid_order_number_format(order_number: Optional[str]) -> bool:
    """
    Check that an order number looks like ORD-YYYYMMDD-NNNN and that the
    embedded date is a real calendar date.

    Examples:
        ORD-20250115-0001 -> True
        ORD-20251345-0001 -> False (month 13)
        ORD-2025011-0001  -> False (seven date digits)
    """
    if not order_number or not order_number.strip():
        return False

    match = ORDER_NUMBER_PATTERN.fullmatch(order_number)
    if not match:
        return False

    year, month, day = (int(group) for group in match.groups()[:3])
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def validate_dates(
    order_date: DateLike,
    delivery_date: Optional[DateLike] = None,
    today: Optional[date] = None,
) -> DateCheck:
    """
    Validate order and delivery dates. Time of day is ignored.

    Args:
        order_date: Date the order was placed
        delivery_date: Optional delivery date
        today: Reference date, defaults to the local current date

    Returns:
        DateCheck(is_valid, message)
    """
    today = today or date.today()
    order_day = _as_date(order_date)

    if order_day > today:
        return DateCheck(False, MSG_ORDER_DATE_IN_FUTURE)

    if delivery_date is not None and _as_date(delivery_date) < order_day:
        return DateCheck(False, MSG_DELIVERY_BEFORE_ORDER)

    return DateCheck(True, "")


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_length(
    errors: List[FieldError],
    field: str,
    value: str,
    max_length: int,
    min_length: int = 0,
    message: str = "",
) -> None:
    if not min_length <= len(value) <= max_length:
        rule = "length" if min_length else "max_length"
        errors.append(FieldError(field, rule, message))


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_product_fields(
    name: Optional[str],
    sku: Optional[str],
    price: Optional[Union[Decimal, float, int]],
    stock_quantity: Optional[int],
    category: Optional[str],
    description: Optional[str] = None,
) -> List[FieldError]:
    """Validate product fields, returning every failed rule."""
    errors: List[FieldError] = []

    if _is_blank(name):
        errors.append(FieldError("name", "required", "Product name is required"))
    else:
        _check_length(
            errors, "name", name, 200, 2,
            "Product name must be between 2 and 200 characters",
        )

    if _is_blank(sku):
        errors.append(FieldError("sku", "required", "SKU is required"))
    else:
        _check_length(errors, "sku", sku, 50, message="SKU must not exceed 50 characters")

    if description is not None:
        _check_length(
            errors, "description", description, 500,
            message="Description must not exceed 500 characters",
        )

    if price is None:
        errors.append(FieldError("price", "required", "Price is required"))
    elif Decimal(str(price)) < Decimal("0.01"):
        errors.append(FieldError("price", "range", "Price must be greater than 0"))

    if stock_quantity is None:
        errors.append(FieldError("stock_quantity", "required", "Stock quantity is required"))
    elif stock_quantity < 0:
        errors.append(FieldError("stock_quantity", "range", "Stock quantity cannot be negative"))

    if _is_blank(category):
        errors.append(FieldError("category", "required", "Category is required"))
    else:
        _check_length(
            errors, "category", category, 100,
            message="Category must not exceed 100 characters",
        )

    return errors


def validate_order_fields(
    product_id: Optional[int],
    order_number: Optional[str],
    customer_name: Optional[str],
    customer_email: Optional[str],
    quantity: Optional[int],
    order_date: Optional[DateLike],
) -> List[FieldError]:
    """Validate order fields, returning every failed rule.

    Stock and date ordering are business checks and live elsewhere;
    this only covers what a single field can tell on its own.
    """
    errors: List[FieldError] = []

    if product_id is None:
        errors.append(FieldError("product_id", "required", "Product is required"))

    if _is_blank(order_number):
        errors.append(FieldError("order_number", "required", "Order number is required"))
    elif len(order_number) > 50:
        errors.append(FieldError(
            "order_number", "max_length", "Order number must not exceed 50 characters"
        ))
    elif not is_valid_order_number_format(order_number):
        errors.append(FieldError("order_number", "format", MSG_ORDER_NUMBER_FORMAT))

    if _is_blank(customer_name):
        errors.append(FieldError("customer_name", "required", "Customer name is required"))
    else:
        _check_length(
            errors, "customer_name", customer_name, 100, 2,
            "Customer name must be between 2 and 100 characters",
        )

    if _is_blank(customer_email):
        errors.append(FieldError("customer_email", "required", "Customer email is required"))
    elif len(customer_email) > 255 or not is_valid_email(customer_email):
        errors.append(FieldError("customer_email", "email", "Invalid email format"))

    if quantity is None:
        errors.append(FieldError("quantity", "required", "Quantity is required"))
    elif quantity < 1:
        errors.append(FieldError("quantity", "range", "Quantity must be greater than 0"))

    if order_date is None:
        errors.append(FieldError("order_date", "required", "Order date is required"))

    return errors

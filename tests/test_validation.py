"""Tests for the pure validators: order numbers, dates and field rules."""
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from app.services.validation import (
    MSG_DELIVERY_BEFORE_ORDER,
    MSG_ORDER_DATE_IN_FUTURE,
    is_valid_order_number_format,
    validate_dates,
    validate_order_fields,
    validate_product_fields,
)


@pytest.mark.parametrize("order_number", [
    "ORD-20250115-0001",
    "ORD-20241231-9999",
    "ORD-20240229-0001",  # leap day
])
def test_order_number_format_valid(order_number):
    assert is_valid_order_number_format(order_number) is True


@pytest.mark.parametrize("order_number", [
    None,
    "",
    "   ",
    "ORD-20251345-0001",  # month 13
    "ORD-20250230-0001",  # 30 February
    "ORD-20250229-0001",  # not a leap year
    "ORD-2025011-0001",   # seven date digits
    "ORD-20250115-001",   # three sequence digits
    "ord-20250115-0001",
    "ORD-20250115-0001 ",
    "XORD-20250115-0001",
    "ORD20250115-0001",
])
def test_order_number_format_invalid(order_number):
    assert is_valid_order_number_format(order_number) is False


def test_dates_order_in_future_is_invalid():
    """Test an order date after today is rejected."""
    tomorrow = date.today() + timedelta(days=1)

    result = validate_dates(tomorrow)

    assert result.is_valid is False
    assert result.message == MSG_ORDER_DATE_IN_FUTURE


def test_dates_delivery_before_order_is_invalid():
    """Test a delivery date before the order date is rejected."""
    today = date.today()

    result = validate_dates(today, today - timedelta(days=1))

    assert result.is_valid is False
    assert result.message == MSG_DELIVERY_BEFORE_ORDER


def test_dates_today_without_delivery_is_valid():
    result = validate_dates(date.today())

    assert result.is_valid is True
    assert result.message == ""


def test_dates_same_day_delivery_is_valid():
    today = date.today()
    assert validate_dates(today, today).is_valid is True


def test_dates_ignore_time_of_day():
    """Test datetimes are compared by calendar date only."""
    today = date(2025, 1, 15)
    late_today = datetime(2025, 1, 15, 23, 59)
    early_same_day = datetime(2025, 1, 15, 0, 1)

    assert validate_dates(late_today, early_same_day, today=today).is_valid is True


def test_dates_future_checked_before_delivery():
    """Test a future order date is reported even when delivery precedes it."""
    today = date(2025, 1, 15)

    result = validate_dates(date(2025, 2, 1), date(2025, 1, 1), today=today)

    assert result.message == MSG_ORDER_DATE_IN_FUTURE


def test_product_fields_valid():
    errors = validate_product_fields(
        name="Dell XPS 14",
        sku="XPS14",
        price=Decimal("1499.99"),
        stock_quantity=0,
        category="Laptop",
        description=None,
    )

    assert errors == []


def test_product_fields_report_every_failure():
    """Test every failing field is reported with its rule."""
    errors = validate_product_fields(
        name="X",
        sku="S" * 51,
        price=Decimal("0"),
        stock_quantity=-1,
        category="",
        description="d" * 501,
    )

    assert {(e.field, e.rule) for e in errors} == {
        ("name", "length"),
        ("sku", "max_length"),
        ("price", "range"),
        ("stock_quantity", "range"),
        ("category", "required"),
        ("description", "max_length"),
    }
    messages = {e.field: e.message for e in errors}
    assert messages["price"] == "Price must be greater than 0"
    assert messages["stock_quantity"] == "Stock quantity cannot be negative"


def test_product_fields_required():
    errors = validate_product_fields(
        name=None, sku="  ", price=None, stock_quantity=None, category=None
    )

    assert all(e.rule == "required" for e in errors)
    assert {e.field for e in errors} == {"name", "sku", "price", "stock_quantity", "category"}


def test_order_fields_valid():
    errors = validate_order_fields(
        product_id=1,
        order_number="ORD-20250115-0001",
        customer_name="Trần Thị B",
        customer_email="b@yahoo.com",
        quantity=2,
        order_date=date(2025, 1, 15),
    )

    assert errors == []


def test_order_fields_report_every_failure():
    errors = validate_order_fields(
        product_id=None,
        order_number="ORD-20251345-0001",
        customer_name="B",
        customer_email="not-an-email",
        quantity=0,
        order_date=None,
    )

    assert {(e.field, e.rule) for e in errors} == {
        ("product_id", "required"),
        ("order_number", "format"),
        ("customer_name", "length"),
        ("customer_email", "email"),
        ("quantity", "range"),
        ("order_date", "required"),
    }


def test_order_fields_long_order_number():
    errors = validate_order_fields(
        product_id=1,
        order_number="ORD-" + "1" * 60,
        customer_name="Alice",
        customer_email="alice@gmail.com",
        quantity=1,
        order_date=date(2025, 1, 15),
    )

    assert [(e.field, e.rule) for e in errors] == [("order_number", "max_length")]

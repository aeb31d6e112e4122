"""Tests for ProductService lookups and write operations."""
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from app.services.exceptions import (
    ConflictError,
    ProductInUseError,
    ProductNotFoundError,
    ValidationFailedError,
    conflict_message,
)
from app.services.order_service import OrderService
from app.services.product_service import PRODUCT_CONFLICTS, ProductService

pytestmark = pytest.mark.anyio


async def test_create_product(db_session, make_product):
    service = ProductService(db_session)

    product = await service.create(make_product())

    assert product.id is not None
    assert product.sku == "TEST-001"
    assert product.price == Decimal("99.99")
    assert product.created_at is not None


async def test_create_product_invalid_fields(db_session, make_product):
    service = ProductService(db_session)

    with pytest.raises(ValidationFailedError) as exc_info:
        await service.create(make_product(price="-10.00", stock_quantity=-5))

    assert {e.field for e in exc_info.value.errors} == {"price", "stock_quantity"}


@pytest.mark.parametrize("overrides, message", [
    ({"name": "Other Product"}, "SKU already exists"),
    ({"sku": "OTHER-001"}, "Product name already exists"),
])
async def test_create_product_duplicate_is_conflict(db_session, make_product, overrides, message):
    """Test name and SKU uniqueness are enforced by the database."""
    service = ProductService(db_session)
    await service.create(make_product())

    with pytest.raises(ConflictError, match=message):
        await service.create(make_product(**overrides))


async def test_get_all_products_sorted_by_name(seeded_session):
    service = ProductService(seeded_session)

    products = await service.get_all_products()

    names = [p.name for p in products]
    assert len(names) == 15
    assert names == sorted(names)


async def test_lookups_are_idempotent(seeded_session):
    """Test repeated read-only lookups return the same data."""
    service = ProductService(seeded_session)

    first = await service.get_by_id(3)
    second = await service.get_by_id(3)
    first_all = [(p.id, p.name, p.stock_quantity) for p in await service.get_all_products()]
    second_all = [(p.id, p.name, p.stock_quantity) for p in await service.get_all_products()]

    assert (first.id, first.name, first.stock_quantity) == (second.id, second.name, second.stock_quantity)
    assert first_all == second_all


async def test_get_by_id_not_found(db_session):
    service = ProductService(db_session)

    assert await service.get_by_id(9999) is None


async def test_get_all_paginated_search(db_session, make_product):
    service = ProductService(db_session)
    await service.create(make_product(name="Apple iPhone", sku="A1"))
    await service.create(make_product(name="Samsung Galaxy", sku="S1"))
    await service.create(make_product(name="Apple MacBook", sku="A2"))

    products, total, total_pages = await service.get_all(page=1, page_size=10, search="apple")

    assert total == 2
    assert total_pages == 1
    assert all("Apple" in p.name for p in products)


async def test_update_product_replaces_fields(db_session, make_product):
    service = ProductService(db_session)
    product = await service.create(make_product())

    updated = await service.update(product.id, make_product(
        name="Updated Name", price="75.00", stock_quantity=3, description=None
    ))

    assert updated.name == "Updated Name"
    assert updated.price == Decimal("75.00")
    assert updated.stock_quantity == 3
    assert updated.description is None


async def test_update_missing_product(db_session, make_product):
    service = ProductService(db_session)

    with pytest.raises(ProductNotFoundError):
        await service.update(9999, make_product())


async def test_delete_product(db_session, make_product):
    service = ProductService(db_session)
    product = await service.create(make_product())

    assert await service.delete(product.id) is True
    assert await service.get_by_id(product.id) is None
    assert await service.delete(product.id) is False


async def test_delete_product_with_orders_is_refused(db_session, make_product, make_order):
    """Test a product referenced by an order cannot be deleted."""
    service = ProductService(db_session)
    product = await service.create(make_product())
    await OrderService(db_session).create_order(make_order(product.id))

    with pytest.raises(ProductInUseError):
        await service.delete(product.id)

    assert await service.get_by_id(product.id) is not None


async def test_get_orders_for_product(db_session, make_product, make_order):
    service = ProductService(db_session)
    orders = OrderService(db_session)
    product = await service.create(make_product())
    other = await service.create(make_product(name="Other", sku="OTHER-001"))
    await orders.create_order(make_order(product.id))
    await orders.create_order(make_order(
        other.id, order_number="ORD-20250115-0002", customer_email="bob@gmail.com"
    ))

    result = await service.get_orders_for_product(product.id)

    assert [o.order_number for o in result] == ["ORD-20250115-0001"]


async def test_get_orders_for_missing_product(db_session):
    service = ProductService(db_session)

    with pytest.raises(ProductNotFoundError):
        await service.get_orders_for_product(9999)


async def test_delete_product_ordered_after_check(db_session, make_product, make_order, monkeypatch):
    """Test an order placed between the check and the delete still blocks it."""
    service = ProductService(db_session)
    product = await service.create(make_product())
    await OrderService(db_session).create_order(make_order(product.id))

    async def no_orders(*args, **kwargs):
        return None

    monkeypatch.setattr(db_session, "scalar", no_orders)

    with pytest.raises(ProductInUseError):
        await service.delete(product.id)

    monkeypatch.undo()
    assert await service.get_by_id(product.id) is not None
    assert len(await service.get_orders_for_product(product.id)) == 1


async def test_get_all_page_size_below_one(db_session, make_product):
    service = ProductService(db_session)
    await service.create(make_product(name="Alpha", sku="A1"))
    await service.create(make_product(name="Beta", sku="B1"))

    products, total, total_pages = await service.get_all(page=1, page_size=0)

    assert len(products) == 1
    assert total == 2
    assert total_pages == 2


@pytest.mark.parametrize("driver_error, message", [
    ("UNIQUE constraint failed: products.sku", "SKU already exists"),
    ("UNIQUE constraint failed: products.name", "Product name already exists"),
    (
        'duplicate key value violates unique constraint "products_name_key"\n'
        "DETAIL:  Key (name)=(Sku Cable) already exists.",
        "Product name already exists",
    ),
    (
        'duplicate key value violates unique constraint "products_sku_key"\n'
        "DETAIL:  Key (sku)=(NAME-01) already exists.",
        "SKU already exists",
    ),
    ("CHECK constraint failed: check_price_positive", "Product conflicts with an existing product"),
])
def test_conflict_message_matches_column(driver_error, message):
    """Test only the violated column picks the message, never the duplicated value."""
    error = IntegrityError("INSERT INTO products ...", {}, Exception(driver_error))

    assert conflict_message(
        error, PRODUCT_CONFLICTS, "Product conflicts with an existing product"
    ) == message

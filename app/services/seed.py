"""
Seed data for a fresh database: 15 fixed products and 30 generated orders.

Orders are generated with a fixed random seed so every run (and every
test) produces the same rows relative to the seeding date.
"""
import logging
import random
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.order import Order
from app.models.product import Product

logger = logging.getLogger(__name__)

RANDOM_SEED = 2025
ORDER_COUNT = 30

# name, sku, description, price, stock_quantity, category
PRODUCTS = [
    ("iPhone 15 Pro", "IPH15P", "Apple flagship", "999.99", 50, "Smartphone"),
    ("Galaxy S24 Ultra", "S24U", "Samsung top model", "1299.99", 40, "Smartphone"),
    ("MacBook Air M3", "MBA-M3", "Apple laptop", "1099.99", 30, "Laptop"),
    ("Dell XPS 14", "XPS14", "Premium ultrabook", "1499.99", 25, "Laptop"),
    ("Sony WH-1000XM5", "WHXM5", "Noise cancelling", "349.99", 120, "Headphone"),
    ("AirPods Pro 2", "APP2", "Apple earbuds", "249.99", 200, "Headphone"),
    ("Logitech MX Master 3S", "MX3S", "Ergonomic mouse", "99.99", 150, "Accessories"),
    ('Samsung 55" QN90C', "QN90C55", "Neo QLED TV", "1499.99", 18, "TV"),
    ('LG OLED C3 65"', "OLED65C3", "OLED television", "2199.99", 12, "TV"),
    ("Canon EOS R6 Mark II", "R6M2", "Mirrorless camera", "2499.99", 15, "Camera"),
    ("Nikon Z6 III", "Z6III", "Full-frame mirrorless", "2499.99", 10, "Camera"),
    ("Samsung T7 1TB SSD", "T7-1TB", "Portable SSD", "109.99", 300, "Storage"),
    ("WD Black SN850X 2TB", "SN850X2TB", "NVMe SSD", "169.99", 80, "Storage"),
    ("Microsoft Surface Pro 9", "SP9", "2-in-1 tablet", "999.99", 35, "Tablet"),
    ('iPad Pro 12.9" M2', "IPDPRO129", "Apple tablet", "1299.99", 45, "Tablet"),
]

CUSTOMER_NAMES = [
    "Nguyễn Văn A", "Trần Thị B", "Lê Văn C", "Phạm Thị D",
    "Hoàng Văn E", "Vũ Thị F", "Đặng Văn G",
]
EMAIL_MAILBOXES = [
    ("a", "gmail.com"), ("b", "yahoo.com"), ("c", "outlook.com"), ("d", "hotmail.com"),
    ("e", "zoho.com"), ("f", "proton.me"), ("g", "icloud.com"),
]


def build_products() -> List[Product]:
    return [
        Product(
            name=name,
            sku=sku,
            description=description,
            price=Decimal(price),
            stock_quantity=stock,
            category=category,
        )
        for name, sku, description, price, stock, category in PRODUCTS
    ]


def build_orders(product_ids: List[int], today: date) -> List[Order]:
    """
    Generate the seed orders deterministically.

    Order numbers carry the seeding date; customer emails get the order
    sequence in the local part so that each one is unique.
    """
    rng = random.Random(RANDOM_SEED)
    orders = []

    for i in range(1, ORDER_COUNT + 1):
        product_id = product_ids[rng.randint(1, len(product_ids)) - 1]
        quantity = rng.randint(1, 5)
        order_date = today - timedelta(days=rng.randint(1, 44))
        delivery_date = None
        if rng.randrange(3) == 0:
            delivery_date = order_date + timedelta(days=rng.randint(2, 9))

        local, domain = rng.choice(EMAIL_MAILBOXES)
        orders.append(Order(
            product_id=product_id,
            order_number=f"ORD-{today:%Y%m%d}-{i:04d}",
            customer_name=rng.choice(CUSTOMER_NAMES),
            customer_email=f"{local}{i:04d}@{domain}",
            quantity=quantity,
            order_date=order_date,
            delivery_date=delivery_date,
        ))

    return orders


async def seed_database(db: AsyncSession, today: Optional[date] = None) -> bool:
    """
    Populate an empty database with the seed products and orders.

    Args:
        db: Database session
        today: Date embedded in order numbers, defaults to the current date

    Returns:
        True if data was inserted, False if products already existed
    """
    existing = await db.scalar(select(Product.id).limit(1))
    if existing is not None:
        logger.info("Database already contains products, skipping seed")
        return False

    today = today or date.today()

    products = build_products()
    db.add_all(products)
    await db.flush()

    orders = build_orders([product.id for product in products], today)
    db.add_all(orders)
    await db.commit()

    logger.info(f"Seeded {len(products)} products and {len(orders)} orders")
    return True

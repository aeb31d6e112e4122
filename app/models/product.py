from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Product(Base):
    """
    Product model representing items available for sale.

    Attributes:
        id: Unique identifier for the product
        name: Product name (unique)
        sku: Stock keeping unit code (unique)
        description: Optional free-text description
        price: Product price (must be positive)
        stock_quantity: Available quantity (must be non-negative)
        category: Product category
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, unique=True)
    sku = Column(String(50), nullable=False, unique=True)
    description = Column(String(1000), nullable=True)
    price = Column(Numeric(18, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    category = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Back-reference only; use ProductService.get_orders_for_product to fetch
    orders = relationship("Order", back_populates="product", lazy="raise", passive_deletes="all")

    __table_args__ = (
        CheckConstraint('price > 0', name='check_price_positive'),
        CheckConstraint('stock_quantity >= 0', name='check_stock_non_negative'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', stock={self.stock_quantity})>"

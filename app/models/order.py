from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from app.database import Base


class OrderStatus(str, enum.Enum):
    """Derived order status. Never stored."""
    PENDING = "Pending"
    DELIVERED = "Delivered"


class Order(Base):
    """
    Order model representing a customer purchase of a single product.

    Attributes:
        id: Unique identifier for the order
        product_id: Reference to the purchased product
        order_number: Business identifier, ORD-YYYYMMDD-NNNN (unique)
        customer_name: Name of the customer
        customer_email: Email of the customer (unique)
        quantity: Number of items ordered
        order_date: Calendar date the order was placed
        delivery_date: Calendar date the order was delivered, if any
        created_at: Timestamp when order was created
        updated_at: Timestamp when order was last updated
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer,
        ForeignKey("products.id", ondelete="RESTRICT", name="fk_orders_products"),
        nullable=False,
        index=True,
    )
    order_number = Column(String(50), nullable=False, unique=True)
    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=False, unique=True)
    quantity = Column(Integer, nullable=False)
    order_date = Column(Date, nullable=False, index=True)
    delivery_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Only available when loaded explicitly (joinedload/selectinload)
    product = relationship("Product", back_populates="orders", lazy="raise")

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_quantity_positive'),
    )

    @property
    def status(self) -> OrderStatus:
        return OrderStatus.DELIVERED if self.delivery_date is not None else OrderStatus.PENDING

    def __repr__(self):
        return f"<Order(id={self.id}, order_number='{self.order_number}', status='{self.status.value}')>"

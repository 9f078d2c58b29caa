import enum
from decimal import Decimal
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.core.database import Base
from backoffice.models.common import generate_custom_id
from backoffice.models.payment import PaymentMethod
from backoffice.utils import purchase_math


class OrderStatus(str, enum.Enum):
    placed = "placed"
    packed = "packed"
    ready_for_pickup = "ready_for_pickup"
    completed = "completed"
    cancelled = "cancelled"


FINAL_ORDER_STATUSES = (OrderStatus.completed, OrderStatus.cancelled)


class OrderPaymentStatus(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"


class Order(Base):
    """Customer sales order for store pickup. Stock leaves when the order is placed."""
    __tablename__ = "orders"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("ORD"))
    order_number = Column(String(30), unique=True, nullable=False, index=True)
    customer_id = Column(String(20), ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = Column(String(255), nullable=True)

    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.placed, index=True)
    payment_status = Column(Enum(OrderPaymentStatus), nullable=False, default=OrderPaymentStatus.pending)
    payment_method = Column(Enum(PaymentMethod), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    total_amount = Column(Numeric(15, 2), nullable=False, default=0)
    points_awarded = Column(Integer, nullable=False, default=0)
    pickup_location = Column(String(255), nullable=False, default="Store Pickup")
    notes = Column(Text, nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer")
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )
    status_history = relationship(
        "OrderStatusHistory", back_populates="order", cascade="all, delete-orphan", order_by="OrderStatusHistory.id"
    )
    invoice = relationship("Invoice", back_populates="order", uselist=False)

    @property
    def total_cost(self) -> Decimal:
        return sum((item.line_cost for item in self.items), purchase_math.ZERO)

    def __repr__(self):
        return f"<Order(order_number='{self.order_number}', status='{self.status}')>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(20), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(20), ForeignKey("products.id"), nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    # cost price when sold, for COGS
    unit_cost = Column(Numeric(15, 2), nullable=False, default=0)
    subtotal = Column(Numeric(15, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    @property
    def line_cost(self) -> Decimal:
        return purchase_math.to_money(self.quantity * (self.unit_cost or 0))


class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(20), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Enum(OrderStatus), nullable=False)
    notes = Column(String(255), nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="status_history")
